from .engine import Database
from .health import DatabaseHealthCheck

__all__ = [
    "Database",
    "DatabaseHealthCheck",
]
