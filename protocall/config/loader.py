"""TOML settings files: an optional defaults file plus a per-environment overlay."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "PROTOCALL_CONFIG_DIR"
ENVIRONMENT_VAR = "PROTOCALL_ENV"


def get_config_dir() -> Path | None:
    """Directory named by ``PROTOCALL_CONFIG_DIR``, or None when unset.

    Raises:
        FileNotFoundError: If the variable names a missing directory
    """
    configured = os.environ.get(CONFIG_DIR_VAR)
    if not configured:
        return None

    config_dir = Path(configured)
    if not config_dir.exists():
        raise FileNotFoundError(f"Config directory not found: {configured}")
    return config_dir


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR, "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse a TOML file.

    Also used for ``.toml`` documents handed to ``resolve_file`` and
    ``require:``.
    """
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested tables.

    Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Read ``default.toml`` then ``{PROTOCALL_ENV}.toml`` from the config dir.

    Both files are optional. Without a config directory the result is empty.
    """
    config_dir = get_config_dir()
    if config_dir is None:
        return {}

    config: dict[str, Any] = {}
    for name in ("default", get_environment()):
        file_path = config_dir / f"{name}.toml"
        if file_path.exists():
            config = deep_merge(config, load_toml(file_path))
    return config
