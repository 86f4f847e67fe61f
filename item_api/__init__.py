"""
Top‑level package for the Item API.

This file makes ``item_api`` a Python package so that modules within
``app`` can be imported using fully qualified names like
``item_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
