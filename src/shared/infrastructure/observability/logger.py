"""
Structured Logging Configuration
structlog setup shared by the API, the scheduling engine and alembic
"""
from __future__ import annotations

import datetime as dt
import logging
import sys
from enum import Enum
from typing import Any, MutableMapping, Optional

import structlog

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "uvicorn.access")


def _plain_values(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Enums as their value, dates ISO, slot times HH:MM."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, dt.time):
            event_dict[key] = value.strftime("%H:%M")
        elif isinstance(value, dt.date) and not isinstance(value, dt.datetime):
            event_dict[key] = value.isoformat()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    *,
    service: Optional[str] = None,
) -> None:
    """
    Route stdlib logging and structlog through one pipeline.

    Every entry carries the contextvars bound for the current request
    (request_id, method, path, user_id, role), plus `service` when given.
    JSON for deployed environments, colored console output otherwise.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _plain_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if service:
        processors.insert(0, _static_fields(service=service))

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=True)
    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _static_fields(**fields: Any):
    def _add(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _add


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("appointment_booked", appointment_id=appt.id, doctor_id=appt.doctor_id)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach request-scoped values to every later entry of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
