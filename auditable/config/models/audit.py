"""Audit state configuration model."""

from pydantic import BaseModel, Field


class AuditConfig(BaseModel):
    """Configuration for per-instance audit state."""

    log_writes: bool = Field(
        default=False,
        description="Emit a debug event for every recorded write",
    )
