"""Root settings model for auditable configuration."""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from auditable.config.models.audit import AuditConfig
from auditable.config.models.interception import InterceptionConfig
from auditable.config.models.registry import RegistryConfig

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["json", "console"]

# Module-level variable to store TOML config for settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by AuditableSettings."""
    global _toml_config
    _toml_config = config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that reads from TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        """Get field value from TOML config."""
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        """Return the TOML config values."""
        return _toml_config.copy()


class AuditableSettings(BaseSettings):
    """Root configuration object containing all nested configuration sections.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/auditable.toml
    3. config/auditable.{AUDITABLE_ENV}.toml
    4. AUDITABLE_* environment variables
    """

    model_config = SettingsConfigDict(
        env_prefix="AUDITABLE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: LogLevel = Field(default="INFO", description="Logging level")
    log_format: LogFormat = Field(default="console", description="Log renderer")
    redact_values: bool = Field(
        default=True,
        description="Redact values of sensitive properties in log events",
    )

    registry: RegistryConfig = Field(
        default_factory=RegistryConfig,
        description="Instance registry configuration",
    )
    interception: InterceptionConfig = Field(
        default_factory=InterceptionConfig,
        description="Interception factory configuration",
    )
    audit: AuditConfig = Field(
        default_factory=AuditConfig,
        description="Audit state configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include TOML config.

        Priority order (highest to lowest):
        1. init_settings (constructor arguments)
        2. env_settings (AUDITABLE_* environment variables)
        3. toml_settings (config/auditable*.toml files)
        4. (defaults from model)
        """
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
