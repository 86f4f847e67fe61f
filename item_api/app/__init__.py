"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules.  The service exposes a single ``Item`` resource through two
families of endpoints: plain synchronous CRUD handlers and
asynchronous handlers that dispatch store calls to a bounded worker
pool with per‑call deadlines and fallback values.
"""

from .main import app  # noqa: F401
