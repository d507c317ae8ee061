"""
Taskboard — User/Task data-access core with a thin REST surface.

Subpackages:
    db       SQLAlchemy models and the persistence handle
    engine   errors, configuration, logging, password hashing
    core     pure validation, derivation and pagination helpers
    stores   UserStore / TaskStore
    api      FastAPI application exposing the stores over HTTP
"""

__version__ = "1.0.0"
__all__ = ["api", "core", "db", "engine", "stores"]
