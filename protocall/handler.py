"""Handler kinds accepted by the resolver.

A handler turns the content of a protocol-tagged string into a value. Two
explicit kinds exist:

- ``Transform`` wraps ``fn(value) -> result``. The result may be awaitable
  (``async def`` handlers, futures), in which case it is awaited.
- ``Continuation`` wraps ``fn(value, done)`` or, with ``with_filename=True``,
  ``fn(value, filename, done)``. The handler reports completion by calling
  ``done(error, output)`` once, from the event loop or from any other thread.

Both expose the same coroutine, ``invoke(value, filename)``, so the chain
executor never cares how a handler completes.
"""

import asyncio
import inspect
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from protocall.errors import ProtocallError
from protocall.observability.logging import get_logger

logger = get_logger(__name__)


class Handler(ABC):
    """Base class for resolver handlers."""

    @property
    def accepts_filename(self) -> bool:
        """Whether the handler wants the originating filename."""
        return False

    @abstractmethod
    async def invoke(self, value: Any, filename: str | None = None) -> Any:
        """Run the handler on ``value`` and return its output."""


@dataclass(eq=False)
class Transform(Handler):
    """Handler whose return value is its output."""

    fn: Callable[[Any], Any]

    async def invoke(self, value: Any, filename: str | None = None) -> Any:
        result = self.fn(value)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass(eq=False)
class Continuation(Handler):
    """Handler that signals its output through a ``done(error, output)`` callback."""

    fn: Callable[..., Any]
    with_filename: bool = False

    @property
    def accepts_filename(self) -> bool:
        return self.with_filename

    async def invoke(self, value: Any, filename: str | None = None) -> Any:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        lock = threading.Lock()
        called = False

        def settle(error: Any, output: Any) -> None:
            if future.done():
                return
            if error is None:
                future.set_result(output)
            elif isinstance(error, BaseException):
                future.set_exception(error)
            else:
                future.set_exception(ProtocallError(str(error)))

        def done(error: Any = None, output: Any = None) -> None:
            nonlocal called
            with lock:
                if called:
                    logger.warning("handler_done_called_twice", handler=_name(self.fn))
                    return
                called = True
            loop.call_soon_threadsafe(settle, error, output)

        try:
            if self.with_filename:
                self.fn(value, filename, done)
            else:
                self.fn(value, done)
        except BaseException:
            future.cancel()
            raise

        return await future


def as_handler(obj: Any) -> Handler:
    """Normalise a registration argument into a Handler.

    Plain callables become ``Transform`` handlers; wrap a callable in
    ``Continuation`` explicitly to use the callback style.
    """
    if isinstance(obj, Handler):
        return obj
    if callable(obj):
        return Transform(obj)
    raise TypeError(f"handler must be a Handler or callable, got {type(obj).__name__}")


def _name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
