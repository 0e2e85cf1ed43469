"""Structured logging configuration using structlog.

Provides JSON logging for services and console logging for development.
Resolved configuration routinely carries credentials (``env:API_TOKEN``,
``file:secrets/key.pem``), so a redaction processor masks secret-looking
fields before anything is rendered.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Sensitive key names (O(1) lookup)
SECRET_KEYS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "auth",
    "authorization",
    "credential",
    "credentials",
    "private_key",
    "access_token",
    "refresh_token",
    "bearer",
})

REDACTED = "[REDACTED]"


class SecretRedactor:
    """Processor that masks secret values in log events.

    Matching is by key name only, nested dicts and lists of dicts included.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Redact secrets from event dictionary."""
        return cast(EventDict, self._redact_dict(event_dict))

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if key.lower() in SECRET_KEYS:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self._redact_dict(item) if isinstance(item, dict) else item
                    for item in value
                ]
            else:
                result[key] = value
        return result


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_secrets: bool = True,
) -> None:
    """Configure structured logging for the process.

    Output goes to stderr. Loggers are not cached, so a later call (or an
    application's own ``structlog.configure``) takes effect for loggers the
    package obtained at import time.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact_secrets:
        processors.append(SecretRedactor())
    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    threshold = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def setup_logging_from_settings() -> None:
    """Configure logging from the ``observability.logging`` settings section."""
    from protocall.config import get_settings

    config = get_settings().observability.logging
    setup_logging(
        level=config.level,
        format=config.format,
        redact_secrets=config.redact_secrets,
    )


def ensure_logging_configured() -> None:
    """Apply the logging settings unless structlog is already configured.

    Called by the package's entry points before they log anything. Without
    it, structlog's built-in defaults print every level to stdout.
    """
    if not structlog.is_configured():
        setup_logging_from_settings()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a lazily configured structlog logger bound to ``name``."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
