"""Configuration loading for protocall.

Configuration is loaded from optional TOML files with environment variable
overrides. It only supplies defaults: anything passed explicitly to a
resolver or handler factory wins.

Usage:
    from protocall.config import get_settings

    settings = get_settings()
    base_dir = settings.handlers.base_dir
"""

from functools import lru_cache

from protocall.config.loader import load_config
from protocall.config.settings import Settings, set_toml_config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. $PROTOCALL_CONFIG_DIR/default.toml (base configuration)
    3. $PROTOCALL_CONFIG_DIR/{PROTOCALL_ENV}.toml (environment overrides)
    4. PROTOCALL_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.

    Returns:
        Settings instance with all configuration loaded and validated
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration.

    Useful for testing or when configuration files have changed.

    Returns:
        Fresh Settings instance
    """
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
