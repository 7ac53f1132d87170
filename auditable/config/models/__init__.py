"""Configuration section models."""

from auditable.config.models.audit import AuditConfig
from auditable.config.models.interception import InterceptionConfig
from auditable.config.models.registry import RegistryConfig

__all__ = [
    "AuditConfig",
    "InterceptionConfig",
    "RegistryConfig",
]
