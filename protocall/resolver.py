"""Protocol resolver: registration, parent delegation and tree resolution.

A ``Resolver`` maps protocol names (``env``, ``path``) to ordered handler
chains. ``resolve`` walks nested data and replaces every string of the form
``"<protocol>:<content>"`` with the output of that protocol's chain, run as a
waterfall over ``<content>``.

Resolvers can be nested. A child sees every protocol of its ancestors, and
for a protocol known to both, the ancestors' handlers run first. The child
only holds a reference to its parent; whoever builds the hierarchy keeps the
parent alive for as long as its children are used.

Registration is not synchronised with resolution. Callers must not call
``use`` or an unregister handle while a ``resolve`` is in flight.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Mapping, Sequence
from pathlib import Path
from typing import Any

from protocall.errors import EmptyHandlerChainError
from protocall.handler import Handler, as_handler
from protocall.loader import load_file
from protocall.observability.logging import ensure_logging_configured, get_logger
from protocall.observability.metrics import track_resolution

logger = get_logger(__name__)

HandlerLike = Handler | Callable[..., Any]
HandlerSpec = HandlerLike | Sequence[HandlerLike]
ResolveCallback = Callable[[BaseException | None, Any], None]


class Unregister:
    """Handle returned by ``Resolver.use``; call it to remove the handler.

    Only the first call removes anything. It returns the removed handler,
    later calls return None.
    """

    def __init__(self, protocol: str, chain: list[Handler], handler: Handler) -> None:
        self.protocol = protocol
        self._chain = chain
        self._handler = handler
        self._removed = False

    @property
    def removed(self) -> bool:
        return self._removed

    def __call__(self) -> Handler | None:
        if self._removed:
            return None
        self._removed = True

        # Identity, not equality: the same callable may be registered twice.
        for index, registered in enumerate(self._chain):
            if registered is self._handler:
                del self._chain[index]
                break

        logger.debug("handler_unregistered", protocol=self.protocol)
        return self._handler


class Resolver:
    """Resolves protocol-tagged strings found anywhere in nested data."""

    def __init__(
        self,
        parent: "Resolver | Mapping[str, HandlerSpec] | None" = None,
        handlers: Mapping[str, HandlerSpec] | None = None,
    ) -> None:
        """Create a resolver.

        Args:
            parent: Resolver to inherit protocols and handlers from. A
                mapping given here (with no ``handlers``) is taken as the
                initial handlers instead.
            handlers: Initial protocol -> handler(s) registrations
        """
        if parent is not None and not isinstance(parent, Resolver):
            if handlers is not None or not isinstance(parent, Mapping):
                raise TypeError("parent must be a Resolver")
            parent, handlers = None, parent

        ensure_logging_configured()
        self.parent: Resolver | None = parent
        self._handlers: dict[str, list[Handler]] = {}

        if handlers:
            self.use(handlers)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def use(self, protocol: Any, handler: Any = None) -> Any:
        """Register handler(s) for protocol(s).

        Accepted shapes:
        - ``use("p", handler)`` returns one ``Unregister``
        - ``use("p", [h1, h2])`` returns a list of handles, same order
        - ``use({"p": h, "q": [h1, h2]})`` returns a dict with the same keys
          holding a handle or list of handles

        Handlers are appended; existing registrations are never replaced.
        Plain callables are registered as ``Transform`` handlers.
        """
        if isinstance(protocol, Mapping):
            if handler is not None:
                raise TypeError("handler must be omitted when registering a mapping")
            registered: dict[str, Any] = {}
            for name, handlers in protocol.items():
                # An empty list still declares the protocol.
                self._chain(name)
                registered[name] = self.use(name, handlers)
            return registered

        if isinstance(handler, (list, tuple)):
            return [self.use(protocol, item) for item in handler]

        if handler is None:
            raise TypeError(f"no handler given for protocol {protocol!r}")

        registered_handler = as_handler(handler)
        chain = self._chain(protocol)
        chain.append(registered_handler)

        logger.debug(
            "handler_registered",
            protocol=protocol,
            kind=type(registered_handler).__name__,
            position=len(chain) - 1,
        )
        return Unregister(protocol, chain, registered_handler)

    def _chain(self, protocol: str) -> list[Handler]:
        if not isinstance(protocol, str) or not protocol or ":" in protocol:
            raise ValueError(f"invalid protocol name: {protocol!r}")
        return self._handlers.setdefault(protocol, [])

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def supported_protocols(self) -> list[str]:
        """Own protocols in registration order, then inherited ones, deduplicated."""
        protocols = list(self._handlers)
        if self.parent is not None:
            protocols.extend(self.parent.supported_protocols)
        return list(dict.fromkeys(protocols))

    def get_protocol(self, value: Any) -> str | None:
        """Return the protocol whose ``"<name>:"`` prefix matches ``value``.

        The longest matching name wins. Returns None for non-strings and for
        strings no visible protocol matches.
        """
        if not isinstance(value, str):
            return None
        matches = [p for p in self.supported_protocols if value.startswith(f"{p}:")]
        return max(matches, key=len, default=None)

    def get_handlers(self, protocol: str) -> list[Handler]:
        """Full chain for ``protocol``: ancestors' handlers first, own last."""
        inherited = self.parent.get_handlers(protocol) if self.parent is not None else []
        return [*inherited, *self._handlers.get(protocol, [])]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        data: Any,
        filename: str | Path | None = None,
        *,
        callback: ResolveCallback | None = None,
    ) -> Awaitable[Any]:
        """Resolve every protocol-tagged string in ``data``.

        Returns an awaitable of the resolved copy. With ``callback``, the
        resolution is scheduled on the running loop instead and
        ``callback(error, result)`` is called once it completes; the
        scheduled task is returned.

        The first handler failure is raised as is; no partial result is
        produced. Siblings already in flight are left to finish.
        """
        name = str(filename) if filename is not None else None
        return self._dispatch(self._resolve(data, name), callback)

    def resolve_file(
        self,
        path: str | Path,
        *,
        callback: ResolveCallback | None = None,
    ) -> Awaitable[Any]:
        """Load ``path`` (module or document) and resolve its value.

        Handlers asking for a filename receive ``str(path)``.

        Raises:
            FileLoadError: If the file cannot be read, parsed or imported
        """
        return self._dispatch(self._resolve_file(path), callback)

    async def _resolve_file(self, path: str | Path) -> Any:
        data = await load_file(path)
        return await self._resolve(data, str(path))

    async def _resolve(self, data: Any, filename: str | None) -> Any:
        if isinstance(data, (list, tuple)):
            values = await asyncio.gather(*(self._resolve(item, filename) for item in data))
            return tuple(values) if isinstance(data, tuple) else list(values)

        if isinstance(data, Mapping):
            keys = list(data)
            values = await asyncio.gather(*(self._resolve(data[key], filename) for key in keys))
            return dict(zip(keys, values))

        protocol = self.get_protocol(data)
        if protocol is None:
            return data

        return await self._run_chain(protocol, data[len(protocol) + 1:], filename)

    async def _run_chain(self, protocol: str, content: str, filename: str | None) -> Any:
        handlers = self.get_handlers(protocol)
        if not handlers:
            raise EmptyHandlerChainError(protocol)

        value: Any = content
        with track_resolution(protocol):
            for position, handler in enumerate(handlers):
                try:
                    passed = filename if position == 0 and handler.accepts_filename else None
                    value = await handler.invoke(value, passed)
                except Exception as exc:
                    logger.debug(
                        "protocol_failed",
                        protocol=protocol,
                        position=position,
                        error_type=type(exc).__name__,
                    )
                    raise

        logger.debug(
            "protocol_resolved",
            protocol=protocol,
            handlers=len(handlers),
            filename=filename,
        )
        return value

    @staticmethod
    def _dispatch(
        coro: Coroutine[Any, Any, Any],
        callback: ResolveCallback | None,
    ) -> Awaitable[Any]:
        if callback is None:
            return coro

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise

        task = loop.create_task(coro)

        def complete(finished: "asyncio.Task[Any]") -> None:
            if finished.cancelled():
                callback(asyncio.CancelledError(), None)
            elif finished.exception() is not None:
                callback(finished.exception(), None)
            else:
                callback(None, finished.result())

        task.add_done_callback(complete)
        return task
