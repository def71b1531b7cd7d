"""
Shared API Layer
Middleware shared by every bounded context
"""
from src.shared.api.middleware import CorrelationIdMiddleware, JwtContextMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "JwtContextMiddleware",
]
