"""HTTP surface — FastAPI application exposing UserStore and TaskStore."""

from taskboard.api.app import create_app

__all__ = ["create_app"]
