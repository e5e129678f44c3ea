"""Structured logging utilities with correlation IDs, timing, and URL redaction."""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional, Dict
from contextlib import contextmanager
from datetime import datetime, timezone
from urllib.parse import urlsplit, urlunsplit

from prime_estates.utils.logging_config import LoggingConfig, get_logger


_correlation_id_var: ContextVar[Optional[str]] = ContextVar('correlation_id', default=None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for a store operation."""
    return f"op_{uuid.uuid4().hex[:12]}"


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """Set the correlation ID in context."""
    _correlation_id_var.set(correlation_id)


@contextmanager
def correlation_context(correlation_id: Optional[str] = None):
    """
    Context manager for correlation ID propagation.

    Nested contexts reuse the outer ID unless one is passed explicitly, so a
    mutation and the refresh it triggers share one ID.
    """
    if correlation_id is None:
        correlation_id = get_correlation_id() or generate_correlation_id()
    
    old_id = get_correlation_id()
    set_correlation_id(correlation_id)
    try:
        yield correlation_id
    finally:
        set_correlation_id(old_id)


def redact_url(url: str) -> str:
    """Strip credentials and query string from a URL before logging it."""
    if not url:
        return url
    parts = urlsplit(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit((parts.scheme, netloc, parts.path, "", ""))


# LogRecord attributes that `extra` may not overwrite
_RESERVED_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class StructuredLogger:
    """
    Logger wrapper that turns keyword arguments into record fields.

    Fields bound with `bind()` are attached to every record, which is how the
    store tags its lines with the current connection mode. Keyword names that
    collide with LogRecord attributes (`name`, `args`, ...) are prefixed with
    `field_` instead of making `logging` raise.
    """

    def __init__(self, logger: logging.Logger, **bound: Any):
        self.logger = logger
        self.bound = bound

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger, **{**self.bound, **fields})

    def _get_extra(self, **kwargs: Any) -> Dict[str, Any]:
        extra: Dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat()}

        correlation_id = get_correlation_id()
        if correlation_id:
            extra["correlation_id"] = correlation_id

        for key, value in {**self.bound, **kwargs}.items():
            extra[f"field_{key}" if key in _RESERVED_RECORD_KEYS else key] = value
        return extra

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=self._get_extra(**kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=self._get_extra(**kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=self._get_extra(**kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        self.logger.error(message, extra=self._get_extra(**kwargs), exc_info=exc_info)

    def exception(self, message: str, **kwargs: Any) -> None:
        self.logger.exception(message, extra=self._get_extra(**kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))


@contextmanager
def log_timing(operation_name: str, logger: Optional[StructuredLogger] = None, **context: Any):
    """
    Time a block and log its outcome.

    Yields a dict; keys the block adds to it (a status code, a row count) are
    included in the completion record. A block that raises is logged as a
    failed operation with the error type, and the exception propagates.
    """
    if logger is None:
        logger = get_structured_logger(__name__)

    fields: Dict[str, Any] = {}
    start_time = time.monotonic()
    logger.debug(f"Starting {operation_name}", operation=operation_name, **context)

    try:
        yield fields
    except Exception as e:
        elapsed_ms = round((time.monotonic() - start_time) * 1000, 2)
        logger.warning(
            f"Failed {operation_name}",
            operation=operation_name,
            outcome="error",
            error_type=type(e).__name__,
            error=str(e),
            processing_time_ms=elapsed_ms,
            **context,
            **fields
        )
        raise

    elapsed_ms = round((time.monotonic() - start_time) * 1000, 2)
    logger.info(
        f"Completed {operation_name}",
        operation=operation_name,
        outcome="ok",
        processing_time_ms=elapsed_ms,
        **context,
        **fields
    )

    threshold_ms = LoggingConfig.LOG_SLOW_OPERATION_THRESHOLD_MS
    if elapsed_ms > threshold_ms:
        logger.warning(
            f"Slow operation detected: {operation_name}",
            operation=operation_name,
            processing_time_ms=elapsed_ms,
            threshold_ms=threshold_ms,
            **context
        )
