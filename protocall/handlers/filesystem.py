"""Filesystem handlers: ``path:``, ``file:`` and ``glob:``."""

import asyncio
import glob as glob_module
import os
from pathlib import Path

from protocall.config import get_settings
from protocall.handler import Transform


def default_base_dir() -> Path:
    """Configured ``handlers.base_dir``, or the current directory."""
    configured = get_settings().handlers.base_dir
    return configured if configured is not None else Path.cwd()


def path(basedir: str | Path | None = None) -> Transform:
    """Create the ``path:`` handler.

    Absolute paths are returned normalised (unchanged when already normal).
    Relative paths are split on ``/`` and joined onto ``basedir``.

    Args:
        basedir: Base directory (defaults to ``default_base_dir()``)
    """
    base_directory = os.path.abspath(basedir if basedir is not None else default_base_dir())

    def path_handler(value: str) -> str:
        if os.path.isabs(value):
            return os.path.normpath(value)
        return os.path.normpath(os.path.join(base_directory, *value.split("/")))

    return Transform(path_handler)


def file(basedir: str | Path | None = None, encoding: str | None = None) -> Transform:
    """Create the ``file:`` handler.

    The value is resolved like ``path:`` and the file read in a worker
    thread: ``bytes`` by default, ``str`` when an encoding is given or
    configured in ``handlers.file_encoding``.
    """
    resolve_path = path(basedir).fn
    text_encoding = encoding if encoding is not None else get_settings().handlers.file_encoding

    async def file_handler(value: str) -> bytes | str:
        target = Path(resolve_path(value))
        if text_encoding is None:
            return await asyncio.to_thread(target.read_bytes)
        return await asyncio.to_thread(target.read_text, encoding=text_encoding)

    return Transform(file_handler)


def glob(cwd: str | Path | None = None) -> Transform:
    """Create the ``glob:`` handler.

    Expands the pattern (``**`` is recursive) relative to ``cwd`` and returns
    the sorted absolute paths of the matches.

    Args:
        cwd: Directory to expand in (``handlers.glob_cwd``, then
            ``default_base_dir()``)
    """
    if cwd is None:
        cwd = get_settings().handlers.glob_cwd or default_base_dir()
    root = os.path.abspath(cwd)
    resolve_path = path(root).fn

    def expand(pattern: str) -> list[str]:
        matches = glob_module.glob(pattern, root_dir=root, recursive=True)
        return sorted(resolve_path(match) for match in matches)

    async def glob_handler(value: str) -> list[str]:
        return await asyncio.to_thread(expand, value)

    return Transform(glob_handler)
