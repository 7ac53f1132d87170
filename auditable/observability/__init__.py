"""Observability: structured logging for change tracking.

Provides standardized logging primitives using structlog.
"""

from auditable.config.settings import AuditableSettings
from auditable.observability.logging import get_library_logger, get_logger, setup_logging


def configure_logging(settings: AuditableSettings) -> None:
    """Apply the logging section of settings to structlog."""
    setup_logging(
        level=settings.log_level,
        format=settings.log_format,
        redact_values=settings.redact_values,
    )


__all__ = ["configure_logging", "get_library_logger", "get_logger", "setup_logging"]
