"""
Main entrypoint for the Item API.

This module assembles the FastAPI application, sets up logging, builds
the worker pool and services, and includes versioned routers.  The
``create_app`` function builds and configures the app, which is then
instantiated at module import time as ``app``.  Importing the app here
makes it easy to run with uvicorn or another ASGI server, e.g.::

    uvicorn item_api.app.main:app --reload

The application title, version, database location and executor sizing
are provided via ``Settings`` from ``core.config``.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, settings
from .core.logging_config import setup_logging
from .core.db import get_database_path, init_db
from .core.diagnostics import FallbackRecorder
from .core.executor import BoundedExecutor
from .api.v1.router import router as v1_router
from .services.item_service import ItemService
from .services.item_store import ItemStore


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    One executor, fallback recorder and item service are created per
    application and stored on ``app.state``.  The database schema is
    migrated on startup and the executor is shut down on shutdown.

    Parameters
    ----------
    app_settings : Optional[Settings]
        Settings to use instead of the module level ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    cfg = app_settings or settings
    setup_logging(cfg.log_level, cfg.log_file)
    logger = logging.getLogger(__name__)

    app = FastAPI(title=cfg.project_name, version=cfg.api_version, debug=cfg.debug)

    db_path = get_database_path(cfg.database_url)
    executor = BoundedExecutor(
        min_workers=cfg.executor_min_workers,
        max_workers=cfg.executor_max_workers,
        queue_capacity=cfg.executor_queue_capacity,
        name_prefix=cfg.executor_thread_prefix,
        keep_alive=cfg.executor_keep_alive_seconds,
    )
    recorder = FallbackRecorder(cfg.diagnostics_capacity)
    app.state.settings = cfg
    app.state.executor = executor
    app.state.recorder = recorder
    app.state.item_service = ItemService(
        store=ItemStore(db_path),
        executor=executor,
        recorder=recorder,
        timeout=cfg.operation_timeout_seconds,
        combine_timeout=cfg.combine_timeout_seconds,
        related_keyword=cfg.related_keyword,
    )

    # Mount versioned routes under /api/v1.
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if it does not exist and ensures
        # all tables are up to date.
        init_db(db_path)
        logger.info("Database ready at %s", db_path)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        # Abandoned (timed out) store calls may still be running; do not
        # block the shutdown on them.
        executor.shutdown(wait=False)

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
