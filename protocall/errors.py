"""Exception hierarchy for protocol resolution.

Errors raised by handlers are never wrapped: they reach the caller of
``Resolver.resolve`` exactly as the handler raised them. The classes here
cover the failures the resolver and the built-in handlers raise themselves.
"""

from pathlib import Path


class ProtocallError(Exception):
    """Base exception for all protocall errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class EmptyHandlerChainError(ProtocallError):
    """Raised when a value matches a protocol that has no handlers."""

    def __init__(self, protocol: str) -> None:
        self.protocol = protocol
        super().__init__(f"no handlers registered for protocol {protocol!r}")


class FileLoadError(ProtocallError):
    """Raised when resolve_file cannot read, parse or import its file."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = str(path)
        super().__init__(f"unable to load {self.path}: {reason}")


class ModuleLoadError(ProtocallError):
    """Raised when a module or file named by a handler cannot be loaded."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        super().__init__(f"unable to load {target!r}: {reason}")


class ExecError(ProtocallError):
    """Raised when an exec: target does not resolve to a callable."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"exec: unable to locate function in {target}")
