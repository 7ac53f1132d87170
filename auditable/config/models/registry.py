"""Registry configuration model."""

from pydantic import BaseModel, Field


class RegistryConfig(BaseModel):
    """Configuration for the instance registry."""

    weak_references: bool = Field(
        default=True,
        description="Drop registry entries when the audited instance is garbage collected",
    )
