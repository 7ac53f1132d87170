"""Configuration loading for auditable.

Configuration is loaded from optional TOML files with environment
variable overrides.

Usage:
    from auditable.config import get_settings

    settings = get_settings()
    weak = settings.registry.weak_references
"""

from functools import lru_cache

from auditable.config.loader import load_config
from auditable.config.settings import AuditableSettings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> AuditableSettings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/auditable.toml
    3. config/auditable.{AUDITABLE_ENV}.toml
    4. AUDITABLE_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    config_dict = load_config()
    set_toml_config(config_dict)

    # pydantic-settings gives env vars priority over the TOML source
    return AuditableSettings()


def reload_settings() -> AuditableSettings:
    """Clear the settings cache and reload configuration.

    Useful for testing or when configuration files have changed.
    """
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "AuditableSettings"]
