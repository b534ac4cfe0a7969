"""Structured logging configuration using structlog.

JSON output for production, console output for development. Tenant
profiles carry team member emails and providers carry bearer tokens, so a
redaction processor masks both before anything is rendered.
"""

import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

SENSITIVE_KEYS: frozenset[str] = frozenset({
    "token",
    "access_token",
    "refresh_token",
    "bearer",
    "authorization",
    "credential",
    "credentials",
    "api_key",
    "password",
    "secret",
    "email",
    "emails",
    "phone",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
BEARER_PATTERN = re.compile(r"(?i)bearer\s+[a-z0-9._~+/=-]+")

_LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


class PIIRedactor:
    """Processor that masks credentials and email addresses in log events.

    Known sensitive keys are replaced wholesale; string values anywhere in
    the event are scanned for email addresses and bearer tokens.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {
                key: "[REDACTED]" if str(key).lower() in SENSITIVE_KEYS else self._redact(item)
                for key, item in value.items()
            }
        if isinstance(value, list | tuple):
            return [self._redact(item) for item in value]
        if isinstance(value, str):
            value = BEARER_PATTERN.sub("Bearer [REDACTED]", value)
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        return value


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_pii: Whether to mask credentials and email addresses
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_pii:
        processors.append(PIIRedactor())

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def bind_tenant(tenant_id: str, **extra: Any) -> None:
    """Bind tenant context to every log event in the current task."""
    structlog.contextvars.bind_contextvars(tenant_id=tenant_id, **extra)


def clear_tenant() -> None:
    structlog.contextvars.clear_contextvars()
