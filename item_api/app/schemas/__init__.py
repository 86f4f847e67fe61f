"""
Pydantic schema definitions for API payloads.

Schemas are separated from the SQLite rows they are built from to
decouple the API representation from persistence.
"""
