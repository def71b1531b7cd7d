from typing import Any, Dict, Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException, status
from fastapi.encoders import jsonable_encoder

from src.shared.error_codes import ERROR_CODES
from src.shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for domain-level errors. Services should raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        # fall back to the contract message for this code
        self.message = message or _msg_for(self.code, default=self.__class__.__name__)
        super().__init__(self.message)
        self.details = details


class ValidationError(DomainError):
    code = "validation_error"
    status_code = 422


class UnauthorizedError(DomainError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(DomainError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainError):
    # generic; set a specific code via subclass or constructor (e.g., "appointment_not_found")
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InternalServerError(DomainError):
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ───────────────────────────── Helpers ──────────────────────────────────────

def _contract(code: str) -> Dict[str, Any]:
    return ERROR_CODES.get(code, {})


def _http_for(code: str) -> int:
    return int(_contract(code).get("http", status.HTTP_500_INTERNAL_SERVER_ERROR))


def _msg_for(code: str, default: Optional[str] = None) -> str:
    return str(_contract(code).get("message", default or code))


def _code_for_status(http_status: int) -> str:
    """First contract code registered for an HTTP status (table order wins)."""
    for code, entry in ERROR_CODES.items():
        if entry["http"] == http_status:
            return code
    return "internal_error"


def error_body(
    req: Request,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> Dict[str, Any]:
    """{code, message, details?, correlation_id?}; empty parts are omitted."""
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    correlation_id = getattr(req.state, "request_id", None)
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def error_response(
    req: Request,
    http_status: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content=jsonable_encoder(error_body(req, code, message, details)),
    )


# ─────────────────────────── Registration ───────────────────────────

async def _on_domain_error(req: Request, exc: DomainError) -> JSONResponse:
    # only 5xx are faults
    log = logger.warning if exc.status_code >= 500 else logger.info
    log("domain_error", code=exc.code, status_code=exc.status_code, path=req.url.path)
    return error_response(req, exc.status_code, exc.code, exc.message, exc.details)


async def _on_invalid_payload(req: Request, exc: Exception) -> JSONResponse:
    code = "validation_error"
    errors = exc.errors() if hasattr(exc, "errors") else []
    return error_response(req, _http_for(code), code, _msg_for(code), {"errors": errors})


async def _on_http_exception(req: Request, exc: HTTPException) -> JSONResponse:
    code = _code_for_status(exc.status_code)
    detail = exc.detail
    message = detail if isinstance(detail, str) else _msg_for(code)
    details = detail if isinstance(detail, dict) else None
    return error_response(req, exc.status_code, code, message, details)


async def _on_unhandled(req: Request, exc: Exception) -> JSONResponse:
    code = "internal_error"
    logger.error("unhandled_exception", path=req.url.path, error_type=type(exc).__name__, exc_info=exc)
    return error_response(req, _http_for(code), code, _msg_for(code), {"type": type(exc).__name__})


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the API in the same contract shape."""
    app.add_exception_handler(DomainError, _on_domain_error)
    app.add_exception_handler(RequestValidationError, _on_invalid_payload)
    app.add_exception_handler(PydanticValidationError, _on_invalid_payload)
    app.add_exception_handler(HTTPException, _on_http_exception)
    app.add_exception_handler(Exception, _on_unhandled)
