"""
Taskboard API — FastAPI application factory.

Run:
    taskboard serve --port 5000

Or:
    uvicorn taskboard.api.app:create_app --factory --port 5000

Error mapping:
    TaskboardError subclasses  -> their status_code, {success: false, error: public_message}
    malformed / missing body   -> 400
    anything else              -> 500, "Server Error" (details only in the log)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskboard import __version__
from taskboard.api import tasks, users
from taskboard.api.envelope import fail
from taskboard.db.session import Database
from taskboard.engine.config import TaskboardConfig, get_config
from taskboard.engine.errors import SERVER_ERROR_MESSAGE, TaskboardError
from taskboard.stores.tasks import TaskStore
from taskboard.stores.users import UserStore

logger = logging.getLogger("taskboard.api")


def create_app(
    database: Optional[Database] = None,
    config: Optional[TaskboardConfig] = None,
) -> FastAPI:
    """
    Build the application around a persistence handle.

    Args:
        database: An already-open Database owned by the caller. When None, a
                  handle is built from *config* and opened/closed with the
                  application's lifespan.
        config:   Settings; defaults to get_config().
    """
    config = config or get_config()
    owns_database = database is None
    if database is None:
        database = Database.from_config(config.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if owns_database:
            database.open(create_tables=config.environment != "prod")
        try:
            yield
        finally:
            if owns_database:
                database.close()

    app = FastAPI(
        title="Taskboard API",
        description="Users and tasks over a thin REST surface",
        version=__version__,
        lifespan=lifespan,
    )

    user_store = UserStore.from_config(database, config)
    app.state.database = database
    app.state.user_store = user_store
    app.state.task_store = TaskStore.from_config(database, user_store, config)

    app.include_router(users.router)
    app.include_router(tasks.router)

    # -- error handlers -----------------------------------------------------

    @app.exception_handler(TaskboardError)
    async def handle_taskboard_error(request: Request, exc: TaskboardError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.to_json())
        else:
            logger.debug("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_type)
        return JSONResponse(status_code=exc.status_code, content=fail(exc.public_message))

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError):
        logger.debug("%s %s -> 400 malformed request: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content=fail("Invalid request body"))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=fail(SERVER_ERROR_MESSAGE))

    # -- health -------------------------------------------------------------

    @app.get("/health")
    def health_check():
        healthy = app.state.database.health_check()
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "version": __version__,
                "database": healthy,
            },
        )

    return app
