"""TOML configuration loader for mailwright.

Reads `default.toml` and `{MAILWRIGHT_ENV}.toml` from the config directory,
deep-merges them, and anchors relative filesystem settings (the schema
directory) to the config directory so deployments do not depend on the
working directory of the process.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from mailwright.observability.logging import get_logger

logger = get_logger(__name__)

CONFIG_DIR_ENV = "MAILWRIGHT_CONFIG_DIR"
ENVIRONMENT_ENV = "MAILWRIGHT_ENV"
DEFAULT_ENVIRONMENT = "development"

# (section, key) pairs holding paths resolved against the config directory
PATH_SETTINGS: tuple[tuple[str, str], ...] = (("schemas", "schema_dir"),)


def get_config_dir() -> Path:
    """Get the configuration directory path.

    MAILWRIGHT_CONFIG_DIR wins when set; otherwise the nearest `config/`
    directory in the working directory or one of its parents is used.
    """
    config_dir_env = os.environ.get(CONFIG_DIR_ENV)
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.exists():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    # Look for config/ in the current directory or up to 5 parents
    current = Path.cwd()
    for _ in range(5):
        config_path = current / "config"
        if config_path.exists():
            return config_path
        current = current.parent

    return Path("config")


def get_environment() -> str:
    """Get the current environment from MAILWRIGHT_ENV (default: development)."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

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

    Environment files usually override one key of a section, so nested
    dictionaries are merged recursively; any other value replaces the base.
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def resolve_paths(config: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    """Anchor relative path settings to base_dir.

    Absolute paths and unset values are left alone. The input is not
    modified.
    """
    result = config.copy()
    for section, key in PATH_SETTINGS:
        values = result.get(section)
        if not isinstance(values, dict) or not values.get(key):
            continue
        path = Path(values[key])
        if not path.is_absolute():
            result[section] = {**values, key: str(base_dir / path)}
    return result


def load_config() -> dict[str, Any]:
    """Load configuration from TOML files.

    Loading order:
    1. config/default.toml (optional; model defaults apply without it)
    2. config/{MAILWRIGHT_ENV}.toml (optional)

    Relative path settings are resolved against the config directory.
    """
    config_dir = get_config_dir()
    env = get_environment()

    config: dict[str, Any] = {}
    loaded: list[str] = []
    for path in (config_dir / "default.toml", config_dir / f"{env}.toml"):
        if path.exists():
            config = deep_merge(config, load_toml(path))
            loaded.append(path.name)

    logger.debug("config_loaded", config_dir=str(config_dir), environment=env, files=loaded)
    return resolve_paths(config, config_dir.resolve())
