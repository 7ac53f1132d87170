"""Per-instance audit state: tracking flag, change ledger and exclusions."""

import threading
from typing import Any, TypeVar, cast

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from auditable.exceptions import TypeMismatchError
from auditable.models import Delta
from auditable.observability.logging import get_library_logger

logger = get_library_logger(__name__)

T = TypeVar("T")


class AuditState:
    """Change ledger for one tracked instance.

    The interception factory calls record_write() for every property
    assignment on the proxy. Writes are recorded only while tracking is on
    and the property is not excluded. The ledger converges to
    (first-observed old value, most recent new value) per property.

    Invariant: no excluded property ever has a ledger entry.
    """

    def __init__(self, *, log_writes: bool = False) -> None:
        self._is_tracking = False
        self._changes: dict[str, Delta] = {}
        self._excluded: set[str] = set()
        self._log_writes = log_writes
        self._lock = threading.RLock()

    # Tracking lifecycle
    def start_tracking(self) -> None:
        self._is_tracking = True

    def stop_tracking(self) -> None:
        self._is_tracking = False

    @property
    def is_tracking(self) -> bool:
        return self._is_tracking

    @property
    def excluded(self) -> frozenset[str]:
        """Property names permanently opted out of tracking."""
        return frozenset(self._excluded)

    # Interception callback
    def record_write(self, property_name: str, current_value: Any, new_value: Any) -> None:
        """Record an intercepted write before it is applied.

        Args:
            property_name: Name of the property being assigned
            current_value: Value the property holds before this write
            new_value: Value being assigned
        """
        if not self._is_tracking or property_name in self._excluded:
            return

        with self._lock:
            delta = self._changes.get(property_name)
            if delta is None:
                delta = Delta(old_value=current_value)
                self._changes[property_name] = delta
            delta.new_value = new_value

        if self._log_writes:
            logger.debug(
                "write_recorded",
                property=property_name,
                old_value=delta.old_value,
                new_value=new_value,
            )

    # Ledger queries
    def get_change(self, property_name: str) -> Delta | None:
        """Raw ledger lookup.

        Unlike get_all_changes(), an entry whose old and new values are
        equal is still returned.
        """
        return self._changes.get(property_name)

    def get_change_typed(self, property_name: str, expected_type: type[T]) -> Delta[T] | None:
        """Ledger lookup with both values checked against expected_type.

        None passes for any type, since it stands for a baseline that was
        never assigned.

        Raises:
            TypeMismatchError: If a recorded value is not a valid expected_type
        """
        delta = self.get_change(property_name)
        if delta is None:
            return None

        adapter = _type_adapter(expected_type)
        old_value = _check_value(adapter, property_name, expected_type, delta.old_value)
        new_value = _check_value(adapter, property_name, expected_type, delta.new_value)
        return cast(
            Delta[T],
            Delta[expected_type].model_construct(  # type: ignore[valid-type]
                old_value=old_value, new_value=new_value
            ),
        )

    def get_all_changes(self) -> dict[str, Delta]:
        """Entries whose old and new values differ by value."""
        with self._lock:
            return {
                name: delta
                for name, delta in self._changes.items()
                if delta.old_value != delta.new_value
            }

    # Ledger maintenance
    def exclude_property(self, property_name: str) -> None:
        """Drop any entry for property_name and never record it again."""
        with self._lock:
            self._changes.pop(property_name, None)
            self._excluded.add(property_name)

    def clear(self) -> None:
        """Drop all ledger entries; exclusions and tracking flag are kept."""
        with self._lock:
            self._changes.clear()

    def __repr__(self) -> str:
        return (
            f"AuditState(is_tracking={self._is_tracking}, "
            f"changes={sorted(self._changes)}, excluded={sorted(self._excluded)})"
        )


def _type_adapter(expected_type: Any) -> TypeAdapter[Any]:
    try:
        return TypeAdapter(expected_type)
    except PydanticSchemaGenerationError:
        # Plain classes need arbitrary type support (validated with isinstance)
        return TypeAdapter(expected_type, config=ConfigDict(arbitrary_types_allowed=True))


def _check_value(
    adapter: TypeAdapter[Any],
    property_name: str,
    expected_type: Any,
    value: Any,
) -> Any:
    if value is None:
        return None
    try:
        return adapter.validate_python(value, strict=True)
    except ValidationError as e:
        raise TypeMismatchError(property_name, expected_type, value) from e
