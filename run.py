"""Entry point for the Item API.

Launches the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as DATABASE_URL, LOG_LEVEL and the executor sizing
is read from environment variables (see ``item_api/app/core/config.py``).

Usage:
    python run.py
"""
import asyncio
import logging
import os
from uvicorn import Config, Server

from item_api.app.main import app


async def run_api() -> None:
    """Serve the API using Uvicorn.

    Host and port are read from environment variables `HOST` and
    `PORT`. Defaults are `0.0.0.0` and `8000`.
    """
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level="info")
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Stopped")
