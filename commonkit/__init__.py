"""Structured logging, SQL and search-request log adapters, job commands and a Redis client."""

__version__ = "0.1.0"

__all__ = [
    "crontab",
    "eslog",
    "logger",
    "rediscollections",
    "redisclient",
    "sqllog",
    "writer",
]