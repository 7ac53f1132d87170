"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development.
Values recorded from audited properties can carry credentials or personal
data, so log events pass through ValueRedactor before rendering.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Sensitive key names (O(1) lookup)
SENSITIVE_KEYS: frozenset[str] = frozenset({
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
    "email",
    "phone",
    "ssn",
    "credit_card",
    "card_number",
    "cvv",
    "pin",
    "private_key",
    "access_token",
    "refresh_token",
})

# Event keys holding recorded property values
VALUE_KEYS: tuple[str, ...] = ("old_value", "new_value")

REDACTED = "[REDACTED]"

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"\+?[\d\s\-\(\)]{10,}")


def is_sensitive_name(name: str) -> bool:
    """Whether a key or property name looks like it holds sensitive data."""
    lowered = name.lower()
    if lowered in SENSITIVE_KEYS:
        return True
    return any(part in SENSITIVE_KEYS for part in lowered.split("_"))


class ValueRedactor:
    """Processor that redacts sensitive values from log events.

    Three passes:
    1. old_value/new_value are replaced when the event's property name
       is sensitive (e.g. a write to `password`)
    2. Key-name lookup for known sensitive keys anywhere in the event
    3. Regex patterns on remaining string values for accidental PII
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        """Redact sensitive values from the event dictionary."""
        property_name = event_dict.get("property")
        redacted = self._redact_dict(event_dict)
        if isinstance(property_name, str) and is_sensitive_name(property_name):
            for key in VALUE_KEYS:
                if key in redacted:
                    redacted[key] = REDACTED
        return cast(EventDict, redacted)

    def _redact_dict(self, data: MutableMapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in data.items():
            if is_sensitive_name(key):
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = self._redact_dict(value)
            elif isinstance(value, str):
                result[key] = self._redact_string(value)
            elif isinstance(value, list):
                result[key] = self._redact_list(value)
            else:
                result[key] = value
        return result

    def _redact_string(self, value: str) -> str:
        value = EMAIL_PATTERN.sub("[EMAIL]", value)
        value = PHONE_PATTERN.sub("[PHONE]", value)
        return value

    def _redact_list(self, items: list[Any]) -> list[Any]:
        result: list[Any] = []
        for item in items:
            if isinstance(item, dict):
                result.append(self._redact_dict(item))
            elif isinstance(item, str):
                result.append(self._redact_string(item))
            elif isinstance(item, list):
                result.append(self._redact_list(item))
            else:
                result.append(item)
        return result


def setup_logging(
    level: str = "INFO",
    format: str = "console",
    redact_values: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_values: Whether to redact sensitive property values
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]

    # Must run before TimeStamper: ISO dates match PHONE_PATTERN
    if redact_values:
        processors.append(ValueRedactor())

    processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    level_num = level_map.get(level.upper(), 20)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        A bound structlog logger
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def _drop(*_args: Any, **_kwargs: Any) -> None:
    return None


class QuietLogger:
    """Logger for library modules that stays silent until structlog is configured.

    structlog's default configuration prints every level to stdout, so
    events are dropped until the host (or setup_logging) configures it.
    """

    def __init__(self, name: str) -> None:
        self._name = name

    def __getattr__(self, method_name: str) -> Any:
        if not structlog.is_configured():
            return _drop
        return getattr(structlog.get_logger(self._name), method_name)


def get_library_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger that emits nothing until logging has been configured.

    Args:
        name: Logger name (typically __name__ of the module)
    """
    return cast(structlog.stdlib.BoundLogger, QuietLogger(name))
