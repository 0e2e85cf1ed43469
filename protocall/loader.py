"""Loading of Python modules and structured documents from disk.

Used by ``Resolver.resolve_file`` and by the ``require``/``exec`` handlers.
Python source is imported; anything else is parsed as a document (TOML for
``.toml`` files, JSON otherwise).
"""

import asyncio
import hashlib
import importlib.machinery
import importlib.util
import json
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from protocall.config.loader import load_toml
from protocall.errors import FileLoadError
from protocall.observability.logging import ensure_logging_configured, get_logger

logger = get_logger(__name__)

MODULE_SUFFIXES: tuple[str, ...] = tuple(importlib.machinery.SOURCE_SUFFIXES)
TOML_SUFFIXES: frozenset[str] = frozenset({".toml"})

# Attribute a config module exports; falls back to its UPPER_CASE names
EXPORT_ATTRIBUTE = "config"


def is_module(path: str | Path) -> bool:
    """Whether ``path`` names Python source rather than a data document."""
    return Path(path).suffix in MODULE_SUFFIXES


def load_module(path: str | Path) -> ModuleType:
    """Import a Python source file by path.

    Modules are registered in ``sys.modules`` under a name derived from
    their absolute path, so loading the same file twice returns the same
    module object, as ``import`` would.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ImportError: If no loader can be created for the file
    """
    path = Path(path).resolve()
    digest = hashlib.sha1(str(path).encode()).hexdigest()[:12]
    module_name = f"_protocall_{path.stem}_{digest}"

    cached = sys.modules.get(module_name)
    if cached is not None:
        return cached

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot create a module loader for {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def module_export(module: ModuleType) -> Any:
    """Return the value a config module exports.

    That is its ``config`` attribute when defined, otherwise a dict of its
    public UPPER_CASE names (the settings-module convention).
    """
    if hasattr(module, EXPORT_ATTRIBUTE):
        return getattr(module, EXPORT_ATTRIBUTE)
    return {
        name: value
        for name, value in vars(module).items()
        if name.isupper() and not name.startswith("_")
    }


def load_document(path: str | Path) -> Any:
    """Read and parse a structured document.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError / tomllib.TOMLDecodeError: If it doesn't parse
    """
    path = Path(path)
    if path.suffix in TOML_SUFFIXES:
        return load_toml(path)
    return json.loads(path.read_text(encoding="utf-8"))


async def load_file(path: str | Path) -> Any:
    """Load the value stored in ``path`` for resolution.

    Documents are read in a worker thread; modules are imported on the
    calling thread.

    Raises:
        FileLoadError: On any read, parse or import failure
    """
    ensure_logging_configured()
    path = Path(path)
    if is_module(path):
        try:
            value = module_export(load_module(path))
        except Exception as exc:
            raise FileLoadError(path, str(exc)) from exc
    else:
        try:
            value = await asyncio.to_thread(load_document, path)
        except (OSError, ValueError) as exc:
            raise FileLoadError(path, str(exc)) from exc

    logger.debug("file_loaded", path=str(path), module=is_module(path))
    return value
