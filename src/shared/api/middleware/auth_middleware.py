"""
Authentication Middleware
JWT parsing and caller context binding
"""
from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from src.config import Settings
from src.shared.exceptions import UnauthorizedError
from src.shared.infrastructure.observability.logger import bind_context, get_logger
from src.shared.security import decode_token, extract_bearer_token, principal_from_claims

logger = get_logger(__name__)


class JwtContextMiddleware(BaseHTTPMiddleware):
    """
    Parses an optional Bearer JWT and attaches the caller to
    request.state.principal (None when anonymous).

    The middleware never rejects a request itself: public routes stay public,
    and protected routes fail in the `get_current_principal` dependency,
    which reads request.state.auth_error to tell "no token" from "bad token".
    """

    def __init__(self, app, settings: Settings) -> None:
        super().__init__(app)
        self._settings = settings

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request.state.principal = None
        request.state.auth_error = None

        token = extract_bearer_token(request.headers.get("Authorization"))
        if token:
            try:
                principal = principal_from_claims(decode_token(token, self._settings))
            except UnauthorizedError as e:
                request.state.auth_error = e
                logger.info("token_rejected", reason=e.message)
            else:
                request.state.principal = principal
                bind_context(user_id=principal.user_id, role=principal.role.value)

        return await call_next(request)
