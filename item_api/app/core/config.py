"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields.  In a
production deployment you should override these via environment
variables or a dedicated configuration service.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Item API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database file.  A relative path is resolved
    # relative to the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "items.db")

    # Worker pool used by the asynchronous endpoints.  ``min`` workers
    # are kept alive; up to ``max`` workers are started when the queue
    # is full, and idle burst workers retire after ``keep_alive`` seconds.
    executor_min_workers: int = int(os.getenv("EXECUTOR_MIN_WORKERS", "5"))
    executor_max_workers: int = int(os.getenv("EXECUTOR_MAX_WORKERS", "10"))
    executor_queue_capacity: int = int(os.getenv("EXECUTOR_QUEUE_CAPACITY", "100"))
    executor_thread_prefix: str = os.getenv("EXECUTOR_THREAD_PREFIX", "AsyncThread-")
    executor_keep_alive_seconds: float = float(os.getenv("EXECUTOR_KEEP_ALIVE_SECONDS", "60"))

    # Deadline applied to every asynchronous store operation, and the
    # separate deadline of the combined info endpoint.
    operation_timeout_seconds: float = float(os.getenv("OPERATION_TIMEOUT_SECONDS", "2"))
    combine_timeout_seconds: float = float(os.getenv("COMBINE_TIMEOUT_SECONDS", "5"))

    # Keyword searched by the combined info endpoint when the client does
    # not supply one.
    related_keyword: str = os.getenv("RELATED_KEYWORD", "DEFAULT_KEYWORD")

    # Number of fallback events kept in memory for the diagnostics endpoint.
    diagnostics_capacity: int = int(os.getenv("DIAGNOSTICS_CAPACITY", "100"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Because the dataclass
# computes values at import time, environment variables should be set
# before importing this module.
settings = Settings()
