"""Resolution of property references to property names.

A property can be referenced by name, by the class-level property object,
or by a one-argument accessor such as ``lambda pet: pet.age``. Accessors
are evaluated against a recorder that notes attribute reads, so only a
single direct read on the argument is accepted.
"""

from collections.abc import Callable
from typing import Any

from auditable.exceptions import InvalidPropertyReferenceError

PropertyReference = str | property | Callable[[Any], Any]


class _AttributeRead:
    """Result of reading one attribute off the recorder.

    Any further use (nested reads, arithmetic, calls) marks the read as
    not direct.
    """

    __slots__ = ("_recorder", "name")

    def __init__(self, recorder: "_ReadRecorder", name: str) -> None:
        self._recorder = recorder
        self.name = name

    def __getattr__(self, name: str) -> Any:
        self._recorder._recorder_misused = True
        return self

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self._recorder._recorder_misused = True
        return self


class _ReadRecorder:
    """Stand-in argument that records attribute reads."""

    def __init__(self) -> None:
        object.__setattr__(self, "_recorder_reads", [])
        object.__setattr__(self, "_recorder_misused", False)

    def __getattr__(self, name: str) -> _AttributeRead:
        read = _AttributeRead(self, name)
        self._recorder_reads.append(read)
        return read

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "_recorder_misused":
            object.__setattr__(self, name, value)
            return
        raise AttributeError("accessors must not assign attributes")


def resolve_property_name(reference: PropertyReference, owner: type | None = None) -> str:
    """Return the property name a reference denotes.

    A property object is named by the class attribute it is bound to,
    which is looked up on owner and its bases. The getter's own name is
    not used: ``age = property(_get_age)`` is the property ``age``.

    Args:
        reference: Attribute name, class-level property object, or
            one-argument accessor performing a single direct attribute read
        owner: Type the property is looked up on (required for property
            objects)

    Raises:
        InvalidPropertyReferenceError: If the reference is not a direct
            property read
    """
    if isinstance(reference, str):
        if not reference.isidentifier():
            raise InvalidPropertyReferenceError(reference, "not a valid attribute name")
        return reference

    if isinstance(reference, property):
        return _resolve_property(reference, owner)

    if callable(reference) and not isinstance(reference, type):
        return _resolve_accessor(reference)

    raise InvalidPropertyReferenceError(
        reference, "expected an attribute name, property or accessor"
    )


def _resolve_property(reference: property, owner: type | None) -> str:
    if reference.fget is None:
        raise InvalidPropertyReferenceError(reference, "property has no getter")
    if owner is None:
        raise InvalidPropertyReferenceError(reference, "property given without its owning type")

    for klass in owner.__mro__:
        for name, value in vars(klass).items():
            if value is reference:
                return name

    raise InvalidPropertyReferenceError(
        reference, f"property is not defined on {owner.__qualname__}"
    )


def _resolve_accessor(accessor: Callable[[Any], Any]) -> str:
    recorder = _ReadRecorder()
    try:
        result = accessor(recorder)
    except Exception as e:
        raise InvalidPropertyReferenceError(
            accessor, "accessor failed when evaluated"
        ) from e

    reads: list[_AttributeRead] = recorder._recorder_reads
    if recorder._recorder_misused or len(reads) != 1 or result is not reads[0]:
        raise InvalidPropertyReferenceError(
            accessor, "accessor must return a single direct attribute read"
        )
    return reads[0].name
