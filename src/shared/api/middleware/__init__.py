"""
Shared API Middleware
Caller identity and correlation ID
"""
from src.shared.api.middleware.auth_middleware import JwtContextMiddleware
from src.shared.api.middleware.correlation_id_middleware import CorrelationIdMiddleware

__all__ = [
    "JwtContextMiddleware",
    "CorrelationIdMiddleware",
]
