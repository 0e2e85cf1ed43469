"""``require:`` and ``exec:`` handlers.

Both load a target that is either a path (starting with ``/``, ``./`` or
``../``, resolved against the handler's base directory) or a dotted module
name. Python source paths are imported, other paths parsed as documents.
"""

import importlib
import re
from collections.abc import Callable, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from protocall.errors import ExecError, ModuleLoadError
from protocall.handler import Transform
from protocall.handlers.filesystem import path
from protocall.loader import is_module, load_document, load_module, module_export

PATH_TARGET = re.compile(r"^\.{0,2}/")


def load_target(value: str, resolve_path: Callable[[str], str]) -> Any:
    """Load the module or document ``value`` names.

    Raises:
        ModuleLoadError: If the target can't be found, read or imported
    """
    if PATH_TARGET.match(value):
        target = Path(resolve_path(value))
        try:
            if is_module(target):
                return load_module(target)
            return load_document(target)
        except Exception as exc:
            raise ModuleLoadError(value, str(exc)) from exc

    try:
        return importlib.import_module(value)
    except ImportError as exc:
        raise ModuleLoadError(value, str(exc)) from exc


def require(basedir: str | Path | None = None) -> Transform:
    """Create the ``require:`` handler.

    Dotted names return the imported module. Path targets return the same
    value ``Resolver.resolve_file`` would load: the parsed document, or a
    Python file's exported ``config`` (its UPPER_CASE names otherwise).
    """
    resolve_path = path(basedir).fn

    def require_handler(value: str) -> Any:
        loaded = load_target(value, resolve_path)
        if isinstance(loaded, ModuleType) and PATH_TARGET.match(value):
            return module_export(loaded)
        return loaded

    return Transform(require_handler)


def exec(basedir: str | Path | None = None) -> Transform:  # noqa: A001
    """Create the ``exec:`` handler.

    ``exec:package.module#factory`` loads the target, looks up ``factory``
    on it (or uses the target itself when no ``#`` is given), calls it
    without arguments and returns the result. Python files are searched as
    modules, not through their exported ``config``. Coroutine results are
    awaited.
    """
    resolve_path = path(basedir).fn

    def exec_handler(value: str) -> Any:
        target, _, attribute = value.partition("#")
        loaded = load_target(target, resolve_path)

        if not attribute:
            method = loaded
        elif isinstance(loaded, Mapping):
            method = loaded.get(attribute)
        else:
            method = getattr(loaded, attribute, None)

        if not callable(method):
            raise ExecError(value)
        return method()

    return Transform(exec_handler)
