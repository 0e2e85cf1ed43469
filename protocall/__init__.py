"""protocall: resolve protocol-tagged values in configuration data.

Usage:
    from protocall import get_default_resolver

    resolver = get_default_resolver("/srv/app")
    config = await resolver.resolve({"dir": "path:data", "token": "env:API_TOKEN"})
"""

from pathlib import Path

from protocall import handlers
from protocall.errors import (
    EmptyHandlerChainError,
    ExecError,
    FileLoadError,
    ModuleLoadError,
    ProtocallError,
)
from protocall.handler import Continuation, Handler, Transform, as_handler
from protocall.resolver import HandlerSpec, Resolver, Unregister

__version__ = "1.0.0"


def create(
    parent: Resolver | None = None,
    initial_handlers: dict[str, HandlerSpec] | None = None,
) -> Resolver:
    """Create a resolver, optionally inheriting from ``parent``."""
    return Resolver(parent, initial_handlers)


def get_default_resolver(
    dirname: str | Path | None = None,
    parent: Resolver | None = None,
) -> Resolver:
    """Create a resolver with the standard handlers registered.

    Registers ``path``, ``file``, ``base64``, ``env``, ``require`` and
    ``exec``; ``glob`` is opt-in. Paths resolve against ``dirname``, then the
    configured ``handlers.base_dir``, then the current directory.
    """
    folder = dirname if dirname is not None else handlers.filesystem.default_base_dir()
    return Resolver(
        parent,
        {
            "path": handlers.path(folder),
            "file": handlers.file(folder),
            "base64": handlers.base64(),
            "env": handlers.env(),
            "require": handlers.require(folder),
            "exec": handlers.exec(folder),
        },
    )


__all__ = [
    "Continuation",
    "EmptyHandlerChainError",
    "ExecError",
    "FileLoadError",
    "Handler",
    "ModuleLoadError",
    "ProtocallError",
    "Resolver",
    "Transform",
    "Unregister",
    "as_handler",
    "create",
    "get_default_resolver",
    "handlers",
]
