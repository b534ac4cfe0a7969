"""Configuration loading for mailwright.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from mailwright.config import get_settings

    settings = get_settings()
    attempts = settings.reconciliation.max_attempts
"""

from functools import lru_cache

from mailwright.config.loader import load_config
from mailwright.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` or `reload_settings()` to reload.
    """
    config_dict = load_config()
    set_toml_config(config_dict)

    # pydantic-settings gives MAILWRIGHT_* env vars priority over TOML
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
