"""Delta model for a single tracked property."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Delta(BaseModel, Generic[T]):
    """Old and new value of one property.

    old_value is the value observed at the first tracked write and
    new_value the most recently assigned one. Both default to None until a
    write has been recorded.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=False)

    old_value: T | None = Field(default=None, description="Value before the first tracked write")
    new_value: T | None = Field(default=None, description="Most recently assigned value")

    @property
    def has_changed(self) -> bool:
        """Whether the old and new values differ by value."""
        return bool(self.old_value != self.new_value)

    def as_tuple(self) -> tuple[Any, Any]:
        return self.old_value, self.new_value
