"""Structlog logging configuration."""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping

import structlog

from .config import get_settings

SECRET_KEYS = frozenset({"access_token", "token", "api_key", "authorization"})
REDACTED = "[REDACTED]"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace raw credential values in an event; masked variants use other keys."""

    del logger, method_name
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(level: str | None = None) -> None:
    """Configure structlog with JSON output on stderr.

    stdout is reserved for the stdio MCP transport.
    """

    level_name = (level or get_settings().log_level).upper()
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level_name, stream=sys.stderr, format="%(message)s", force=True)
    # httpx logs full request URLs, which carry access_token in the query string.
    logging.getLogger("httpx").setLevel(max(logging.WARNING, logging.getLogger().level))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger."""

    return structlog.get_logger(name)


__all__ = ["configure_logging", "get_logger", "redact_secrets"]
