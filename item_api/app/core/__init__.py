"""
Core infrastructure: configuration, logging, the SQLite connection
helpers and the asynchronous execution primitives (bounded executor,
deadlines with fallbacks and the fallback recorder).
"""
