"""Transparent change tracking for plain data objects.

Usage:
    from auditable import AuditRegistry

    registry = AuditRegistry()
    pet = registry.make_auditable(Pet)
    pet.age = 1
    registry.start_tracking_changes(pet)
    pet.age = 2
    registry.get_change(pet, lambda p: p.age)  # Delta(old_value=1, new_value=2)
"""

from auditable.exceptions import (
    AuditableError,
    ErrorCode,
    InvalidPropertyReferenceError,
    NotAuditedError,
    TypeMismatchError,
)
from auditable.interception import (
    InterceptionFactory,
    SubclassInterceptionFactory,
    WriteCallback,
)
from auditable.models import ChangeSet, Delta
from auditable.properties import PropertyReference, resolve_property_name
from auditable.registry import AuditRegistry
from auditable.state import AuditState

__all__ = [
    "AuditRegistry",
    "AuditState",
    "AuditableError",
    "ChangeSet",
    "Delta",
    "ErrorCode",
    "InterceptionFactory",
    "InvalidPropertyReferenceError",
    "NotAuditedError",
    "PropertyReference",
    "SubclassInterceptionFactory",
    "TypeMismatchError",
    "WriteCallback",
    "resolve_property_name",
]
