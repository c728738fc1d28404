"""
Structured logging for the pipe catalog.

Events are snake_case names with keyword fields, e.g.
``logger.info("pipe_created", item_id=pipe.id)``. Development renders to the
console; anything else renders one JSON object per line.
"""

import logging
import os
import sys
import time
from collections.abc import Callable, MutableMapping
from functools import lru_cache, wraps
from typing import Any, TypeVar

import structlog
from structlog.types import Processor

F = TypeVar("F", bound=Callable[..., Any])

REDACTED_FIELDS = frozenset({"password", "password_hash", "token", "session_id", "authorization"})


def _is_development() -> bool:
    from .config import get_settings

    return get_settings().debug or os.getenv("ENV", "development") == "development"


def _add_service_name(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]):
    event_dict.setdefault("service", "pipe_catalog")
    return event_dict


def _redact_secrets(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]):
    """Mask credentials and visitor session ids before rendering."""
    for key in REDACTED_FIELDS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def get_processors(development: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_service_name,
        _redact_secrets,
    ]
    if development:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return processors


@lru_cache(maxsize=1)
def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog. Repeated calls are no-ops."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=get_processors(_is_development()),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)  # type: ignore[no-any-return]


# =============================================================================
# Context
# =============================================================================


def bind_context(**kwargs: Any) -> None:
    """Attach fields to every event logged by the current request or task."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """
    Bind fields for the duration of a block only.

        with LogContext(item_type="pipe", item_id=pipe_id):
            logger.info("image_processed")   # carries item_type and item_id
    """

    def __init__(self, **fields: Any):
        self.fields = fields

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        structlog.contextvars.unbind_contextvars(*self.fields)
        return False


def log_timing(operation: str, logger: structlog.stdlib.BoundLogger | None = None) -> Callable[[F], F]:
    """
    Log the duration of each call as ``operation_complete`` or, when it
    raises, ``operation_failed`` (the exception is re-raised).
    """

    def decorator(func: F) -> F:
        timing_logger = logger or get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                timing_logger.warning(
                    "operation_failed",
                    operation=operation,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                    error=str(e),
                )
                raise
            timing_logger.info(
                "operation_complete",
                operation=operation,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


# =============================================================================
# ASGI
# =============================================================================


class RequestLoggingMiddleware:
    """
    Log one ``request_complete`` event per HTTP request.

    Must sit inside RequestIDMiddleware so the request id is already in the
    scope state and in the log context. The context is cleared afterwards.
    """

    def __init__(self, app):
        self.app = app
        self._logger: structlog.stdlib.BoundLogger | None = None

    @property
    def logger(self) -> structlog.stdlib.BoundLogger:
        if self._logger is None:
            self._logger = get_logger("http")
        return self._logger

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500

        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            if status_code >= 500:
                log = self.logger.error
            elif status_code >= 400:
                log = self.logger.warning
            else:
                log = self.logger.info
            log(
                "request_complete",
                method=scope.get("method", ""),
                path=scope.get("path", ""),
                status_code=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
            clear_context()


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogContext",
    "log_timing",
    "RequestLoggingMiddleware",
]
