"""Logging setup for zotcap runs, tagging every record with a run correlation ID."""

import logging
import sys
import uuid
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s correlation_id=%(correlation_id)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# HTTP client loggers (httpx for Capacities, pyzotero also goes through httpx)
HTTP_LOGGERS = ("httpx", "httpcore", "httpcore.http11", "httpcore.connection")

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str:
    """Return the correlation ID of the current run, creating one on first use."""
    corr_id = correlation_id_var.get()
    if corr_id is None:
        corr_id = new_correlation_id()
    return corr_id


def new_correlation_id() -> str:
    """Start a new run: generate, store and return a fresh correlation ID."""
    corr_id = uuid.uuid4().hex[:12]
    correlation_id_var.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str) -> None:
    correlation_id_var.set(corr_id)


class CorrelationIDFilter(logging.Filter):
    """Adds `correlation_id` to each record so the format string can reference it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()  # type: ignore[attr-defined]
        return True


def configure_logging(level: int = logging.INFO, verbose: bool = False) -> None:
    """
    Configure root logging for one CLI invocation.

    Args:
        level: Root logging level
        verbose: If True, HTTP client request logs are shown at INFO; otherwise
            they are limited to warnings
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(CorrelationIDFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    http_level = logging.INFO if verbose else logging.WARNING
    for logger_name in HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(http_level)

    new_correlation_id()
