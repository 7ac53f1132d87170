"""ChangeSet model for detached change snapshots."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from auditable.models.delta import Delta


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


class ChangeSet(BaseModel):
    """Point-in-time copy of the changes recorded for one instance.

    Detached from the live ledger: later writes to the instance do not
    alter a ChangeSet that was already taken.
    """

    model_config = ConfigDict(frozen=True)

    type_name: str = Field(..., description="Qualified name of the audited type")
    is_tracking: bool = Field(..., description="Tracking flag at snapshot time")
    changes: dict[str, Delta] = Field(
        default_factory=dict, description="Properties whose value differs"
    )
    excluded: frozenset[str] = Field(
        default_factory=frozenset, description="Properties opted out of tracking"
    )
    taken_at: datetime = Field(default_factory=utc_now, description="Snapshot time")

    @property
    def changed_properties(self) -> list[str]:
        return sorted(self.changes)
