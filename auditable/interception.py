"""Interception factory: instances whose attribute writes are observable.

The default factory derives, once per user type, a subclass whose
__setattr__ is an observable setter. Every write to a public attribute
first invokes a write callback with (name, current value, new value) and
then performs the normal assignment, so plain attributes, property setters
and slots all keep working. Reads are never intercepted.
"""

import threading
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from auditable.observability.logging import get_library_logger

logger = get_library_logger(__name__)

T = TypeVar("T")

WriteCallback = Callable[[str, Any, Any], None]
"""Called as (property_name, current_value, new_value) before each write."""

# Slot holding the write callback on every proxy instance
HOOK_ATTRIBUTE = "_auditable_on_write"

# Marks classes produced by this module
PROXY_MARKER = "__auditable_proxy__"


class InterceptionFactory(Protocol):
    """Produces instances whose property writes are routed to a callback."""

    def create(
        self,
        cls: type[T],
        on_write: WriteCallback,
        *args: Any,
        **kwargs: Any,
    ) -> T:
        """Construct an instance of cls that reports writes to on_write."""
        ...


def _read_current(instance: Any, name: str) -> Any:
    # Unassigned attributes (no instance value, no class default) read as None
    return getattr(instance, name, None)


def is_proxy_type(cls: type) -> bool:
    """Whether cls was generated by SubclassInterceptionFactory."""
    return bool(cls.__dict__.get(PROXY_MARKER, False))


class SubclassInterceptionFactory:
    """Default interception factory built on a generated subclass.

    The generated type keeps isinstance(proxy, cls) true. Attributes whose
    name starts with an underscore are internal state and bypass the
    callback unless track_private_attributes is set.
    """

    def __init__(self, *, track_private_attributes: bool = False) -> None:
        self.track_private_attributes = track_private_attributes
        self._proxy_types: dict[type, type] = {}
        self._lock = threading.Lock()

    def create(
        self,
        cls: type[T],
        on_write: WriteCallback,
        *args: Any,
        **kwargs: Any,
    ) -> T:
        proxy_type = self.proxy_type_for(cls)
        instance = proxy_type.__new__(proxy_type, *args, **kwargs)
        # Install the hook before __init__ so construction writes are routed too
        object.__setattr__(instance, HOOK_ATTRIBUTE, on_write)
        instance.__init__(*args, **kwargs)
        return instance

    def proxy_type_for(self, cls: type[T]) -> type[T]:
        """Return the cached interceptable subclass of cls.

        Raises:
            TypeError: If cls is not a class or cannot be subclassed
        """
        if not isinstance(cls, type):
            raise TypeError(f"Expected a class, got {cls!r}")
        if is_proxy_type(cls):
            return cls

        with self._lock:
            proxy_type = self._proxy_types.get(cls)
            if proxy_type is None:
                proxy_type = self._build_proxy_type(cls)
                self._proxy_types[cls] = proxy_type
        return proxy_type

    def _build_proxy_type(self, cls: type) -> type:
        track_private = self.track_private_attributes

        def __setattr__(self: Any, name: str, value: Any) -> None:
            if name != HOOK_ATTRIBUTE and (track_private or not name.startswith("_")):
                on_write = _read_hook(self)
                if on_write is not None:
                    on_write(name, _read_current(self, name), value)
            super(proxy_type, self).__setattr__(name, value)

        slots: list[str] = [HOOK_ATTRIBUTE]
        if not cls.__weakrefoffset__:
            slots.append("__weakref__")

        prefix, _, type_name = cls.__qualname__.rpartition(".")
        qualname = f"{prefix}.Auditable{type_name}" if prefix else f"Auditable{type_name}"

        namespace = {
            "__slots__": tuple(slots),
            "__setattr__": __setattr__,
            "__module__": cls.__module__,
            "__qualname__": qualname,
            "__doc__": cls.__doc__,
            PROXY_MARKER: True,
        }
        proxy_type = type(cls)(f"Auditable{cls.__name__}", (cls,), namespace)

        logger.debug(
            "proxy_type_built",
            type_name=cls.__qualname__,
            proxy_type=proxy_type.__qualname__,
        )
        return proxy_type


def _read_hook(instance: Any) -> WriteCallback | None:
    try:
        return object.__getattribute__(instance, HOOK_ATTRIBUTE)
    except AttributeError:
        return None


def detach(instance: Any) -> None:
    """Stop routing writes on a proxy instance to its callback."""
    if is_proxy_type(type(instance)):
        object.__setattr__(instance, HOOK_ATTRIBUTE, None)
