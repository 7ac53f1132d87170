"""Registry of auditable instances and their audit state.

AuditRegistry is the public entry point: it creates auditable instances
through an interception factory and routes every change-tracking
operation to the AuditState bound to that instance.
"""

import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, TypeVar, overload

from auditable.config import get_settings
from auditable.config.settings import AuditableSettings
from auditable.exceptions import NotAuditedError
from auditable.interception import (
    InterceptionFactory,
    SubclassInterceptionFactory,
    detach,
)
from auditable.models import ChangeSet, Delta
from auditable.observability.logging import get_library_logger
from auditable.properties import PropertyReference, resolve_property_name
from auditable.state import AuditState

logger = get_library_logger(__name__)

T = TypeVar("T")


class _Entry:
    """Registry slot: the audited instance (strong or weak) and its state."""

    __slots__ = ("_ref", "state")

    def __init__(self, ref: Any, state: AuditState) -> None:
        self._ref = ref
        self.state = state

    def instance(self) -> Any:
        if isinstance(self._ref, weakref.ref):
            return self._ref()
        return self._ref


class AuditRegistry:
    """Maps auditable instances to their AuditState.

    Instances are keyed by identity, never by equality, so value-equal or
    unhashable instances stay distinct. With weak references enabled an
    entry disappears once its instance is garbage collected; otherwise
    entries live until release() or until the registry itself is dropped.

    The registry map is thread-safe. A single audited instance must not be
    mutated from several threads at once.
    """

    def __init__(
        self,
        settings: AuditableSettings | None = None,
        factory: InterceptionFactory | None = None,
    ) -> None:
        """Initialize an empty registry.

        Args:
            settings: Configuration (defaults to the process settings)
            factory: Interception factory (defaults to a subclass-based
                factory configured from settings)
        """
        self._settings = settings or get_settings()
        self._factory: InterceptionFactory = factory or SubclassInterceptionFactory(
            track_private_attributes=self._settings.interception.track_private_attributes,
        )
        self._weak_references = self._settings.registry.weak_references
        self._entries: dict[int, _Entry] = {}
        self._lock = threading.RLock()

    # Creation
    def make_auditable(self, cls: type[T], *args: Any, **kwargs: Any) -> T:
        """Create an instance of cls whose property writes are tracked.

        Tracking is off until start_tracking_changes() is called.

        Args:
            cls: Type to instantiate
            *args: Constructor positional arguments
            **kwargs: Constructor keyword arguments

        Returns:
            The auditable instance (an instance of cls)
        """
        state = AuditState(log_writes=self._settings.audit.log_writes)
        instance = self._factory.create(cls, state.record_write, *args, **kwargs)
        self._register(instance, state)

        logger.debug("auditable_created", type_name=type(instance).__qualname__)
        return instance

    def _register(self, instance: Any, state: AuditState) -> None:
        key = id(instance)
        ref: Any = instance
        if self._weak_references:
            ref = weakref.ref(instance, self._make_reaper(key))

        with self._lock:
            self._entries[key] = _Entry(ref, state)

    def _make_reaper(self, key: int) -> Any:
        registry_ref = weakref.ref(self)

        def reap(ref: weakref.ref[Any]) -> None:
            registry = registry_ref()
            if registry is None:
                return
            with registry._lock:
                entry = registry._entries.get(key)
                # A new instance may already reuse the id
                if entry is not None and entry._ref is ref:
                    del registry._entries[key]

        return reap

    # Lookup
    def _find(self, instance: Any) -> AuditState | None:
        if instance is None:
            return None
        with self._lock:
            entry = self._entries.get(id(instance))
        if entry is None or entry.instance() is not instance:
            return None
        return entry.state

    def get_state(self, instance: Any) -> AuditState:
        """Return the AuditState bound to instance.

        Raises:
            NotAuditedError: If instance is not auditable
        """
        state = self._find(instance)
        if state is None:
            raise NotAuditedError(instance)
        return state

    def is_auditable(self, instance: Any) -> bool:
        """Whether instance was produced by make_auditable (None never is)."""
        return self._find(instance) is not None

    def is_being_audited(self, instance: Any) -> bool:
        """Whether instance is auditable and currently tracking changes."""
        state = self._find(instance)
        return state is not None and state.is_tracking

    # Tracking lifecycle
    def start_tracking_changes(self, instance: Any) -> None:
        self.get_state(instance).start_tracking()
        logger.debug("tracking_started", type_name=type(instance).__qualname__)

    def stop_tracking_changes(self, instance: Any) -> None:
        self.get_state(instance).stop_tracking()
        logger.debug("tracking_stopped", type_name=type(instance).__qualname__)

    @contextmanager
    def tracking(self, instance: T) -> Iterator[T]:
        """Track changes for the duration of a with-block.

        Tracking is stopped on exit, including when the block raises.
        """
        self.start_tracking_changes(instance)
        try:
            yield instance
        finally:
            self.stop_tracking_changes(instance)

    # Change queries
    def get_changes(self, instance: Any) -> dict[str, Delta]:
        """Properties whose value differs from the first observed value.

        Raises:
            NotAuditedError: If instance is not auditable
        """
        return self.get_state(instance).get_all_changes()

    @overload
    def get_change(self, instance: Any, prop: PropertyReference) -> Delta | None: ...

    @overload
    def get_change(
        self, instance: Any, prop: PropertyReference, expected_type: type[T]
    ) -> Delta[T] | None: ...

    def get_change(
        self,
        instance: Any,
        prop: PropertyReference,
        expected_type: Any = None,
    ) -> Delta | None:
        """Return the recorded change for one property.

        Unlike get_changes(), a property written back to its original
        value is still reported.

        Args:
            instance: Auditable instance
            prop: Property name, class-level property, or accessor lambda
            expected_type: When given, both values are checked against it

        Returns:
            The Delta, or None if the property was never written while
            tracked (or is excluded)

        Raises:
            NotAuditedError: If instance is not auditable
            InvalidPropertyReferenceError: If prop is not a direct property read
            TypeMismatchError: If a recorded value is not a valid expected_type
        """
        state = self.get_state(instance)
        name = resolve_property_name(prop, type(instance))
        if expected_type is None:
            return state.get_change(name)
        return state.get_change_typed(name, expected_type)

    def snapshot(self, instance: Any) -> ChangeSet:
        """Detached copy of the changes currently reported by get_changes()."""
        state = self.get_state(instance)
        changes = {
            name: Delta(old_value=delta.old_value, new_value=delta.new_value)
            for name, delta in state.get_all_changes().items()
        }
        return ChangeSet(
            type_name=type(instance).__qualname__,
            is_tracking=state.is_tracking,
            changes=changes,
            excluded=state.excluded,
        )

    # Ledger maintenance
    def exclude_property(self, instance: Any, prop: PropertyReference) -> None:
        """Stop tracking one property of instance, dropping any recorded change.

        Raises:
            NotAuditedError: If instance is not auditable
            InvalidPropertyReferenceError: If prop is not a direct property read
        """
        state = self.get_state(instance)
        name = resolve_property_name(prop, type(instance))
        state.exclude_property(name)
        logger.debug(
            "property_excluded",
            type_name=type(instance).__qualname__,
            property=name,
        )

    def reset_changes(self, instance: Any) -> None:
        """Forget recorded changes; exclusions and tracking flag are kept."""
        self.get_state(instance).clear()

    def release(self, instance: Any) -> bool:
        """Remove instance from the registry.

        The instance keeps working as a plain object but is no longer
        auditable. Never raises.

        Returns:
            Whether an entry was removed
        """
        if self._find(instance) is None:
            return False
        with self._lock:
            self._entries.pop(id(instance), None)
        detach(instance)

        logger.debug("auditable_released", type_name=type(instance).__qualname__)
        return True

    def __contains__(self, instance: Any) -> bool:
        return self.is_auditable(instance)

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.instance() is not None)
