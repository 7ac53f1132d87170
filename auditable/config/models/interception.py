"""Interception factory configuration model."""

from pydantic import BaseModel, Field


class InterceptionConfig(BaseModel):
    """Configuration for the default interception factory."""

    track_private_attributes: bool = Field(
        default=False,
        description="Route writes to underscore-prefixed attributes to the audit state",
    )
