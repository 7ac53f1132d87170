"""TOML configuration loader with deep merge support."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_FILE_STEM = "auditable"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    The config directory can be overridden with AUDITABLE_CONFIG_DIR env var.
    Defaults to 'config/' under the current working directory; parent
    directories are not searched.
    """
    config_dir_env = os.environ.get("AUDITABLE_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    return Path.cwd() / "config"


def get_environment() -> str:
    """Get the current environment from AUDITABLE_ENV.

    Defaults to 'development' if not set.
    """
    return os.environ.get("AUDITABLE_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

    Args:
        file_path: Path to the TOML file

    Returns:
        Dictionary containing the TOML data

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    For nested dictionaries, values are merged recursively.
    For other values, override replaces base.
    """
    result = base.copy()

    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config() -> dict[str, Any]:
    """Load configuration from TOML files.

    Loading order:
    1. config/auditable.toml (optional)
    2. config/auditable.{AUDITABLE_ENV}.toml (optional)

    Both files are optional; a library embedded in a host application
    must work with no configuration on disk.

    Returns:
        Merged configuration dictionary
    """
    config_dir = get_config_dir()
    env = get_environment()

    config: dict[str, Any] = {}

    base_path = config_dir / f"{CONFIG_FILE_STEM}.toml"
    if base_path.exists():
        config = load_toml(base_path)

    env_path = config_dir / f"{CONFIG_FILE_STEM}.{env}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    return config
