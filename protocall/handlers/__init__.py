"""Built-in handler factories.

Each factory returns a ``Transform`` ready to pass to ``Resolver.use``:

    resolver.use("path", handlers.path("/srv/app"))
    resolver.use({"env": handlers.env(), "base64": handlers.base64()})

Defaults not given explicitly come from the ``handlers`` settings section.
"""

from protocall.handlers.encoding import base64
from protocall.handlers.environment import env
from protocall.handlers.filesystem import file, glob, path
from protocall.handlers.modules import exec, require

__all__ = ["base64", "env", "exec", "file", "glob", "path", "require"]
