"""Unit tests for Transform and Continuation handlers."""

import asyncio
import threading
from typing import Any

import pytest

from protocall.errors import ProtocallError
from protocall.handler import Continuation, Handler, Transform, as_handler


class TestTransform:
    """Tests for Transform.invoke."""

    @pytest.mark.asyncio
    async def test_sync_function(self) -> None:
        """The return value is the output."""
        assert await Transform(str.upper).invoke("abc") == "ABC"

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        """Coroutine results are awaited."""

        async def double(value: int) -> int:
            await asyncio.sleep(0)
            return value * 2

        assert await Transform(double).invoke(21) == 42

    @pytest.mark.asyncio
    async def test_future_result(self) -> None:
        """Any awaitable result is awaited."""
        loop = asyncio.get_running_loop()

        def later(value: str) -> "asyncio.Future[str]":
            future: asyncio.Future[str] = loop.create_future()
            loop.call_later(0.01, future.set_result, value + "!")
            return future

        assert await Transform(later).invoke("hi") == "hi!"

    @pytest.mark.asyncio
    async def test_ignores_filename(self) -> None:
        """Transforms never receive the filename."""
        assert Transform(str.upper).accepts_filename is False
        assert await Transform(str.upper).invoke("a", "file.json") == "A"

    @pytest.mark.asyncio
    async def test_raises(self) -> None:
        """Exceptions propagate unchanged."""
        with pytest.raises(ZeroDivisionError):
            await Transform(lambda value: 1 / 0).invoke("x")


class TestContinuation:
    """Tests for Continuation.invoke."""

    @pytest.mark.asyncio
    async def test_sync_done(self) -> None:
        """done may be called before fn returns."""
        handler = Continuation(lambda value, done: done(None, value * 2))
        assert await handler.invoke(4) == 8

    @pytest.mark.asyncio
    async def test_deferred_done(self) -> None:
        """done may be called later from the loop."""

        def deferred(value: str, done: Any) -> None:
            asyncio.get_running_loop().call_later(0.01, done, None, value + "?")

        assert await Continuation(deferred).invoke("what") == "what?"

    @pytest.mark.asyncio
    async def test_done_from_thread(self) -> None:
        """done may be called from a worker thread."""

        def threaded(value: str, done: Any) -> None:
            threading.Thread(target=done, args=(None, value.upper())).start()

        assert await asyncio.wait_for(Continuation(threaded).invoke("t"), timeout=1) == "T"

    @pytest.mark.asyncio
    async def test_done_error(self) -> None:
        """An exception passed to done is raised."""
        error = KeyError("missing")
        with pytest.raises(KeyError) as exc_info:
            await Continuation(lambda value, done: done(error, None)).invoke("x")
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_done_non_exception_error(self) -> None:
        """Non-exception error values are raised as ProtocallError."""
        with pytest.raises(ProtocallError, match="bad value"):
            await Continuation(lambda value, done: done("bad value", None)).invoke("x")

    @pytest.mark.asyncio
    async def test_second_done_ignored(self) -> None:
        """Only the first call to done counts."""

        def twice(value: str, done: Any) -> None:
            done(None, "first")
            done(None, "second")

        assert await Continuation(twice).invoke("x") == "first"

    @pytest.mark.asyncio
    async def test_fn_raises(self) -> None:
        """An exception raised by fn fails the handler."""

        def broken(value: str, done: Any) -> None:
            raise RuntimeError("broken")

        with pytest.raises(RuntimeError, match="broken"):
            await Continuation(broken).invoke("x")

    @pytest.mark.asyncio
    async def test_with_filename(self) -> None:
        """with_filename passes the filename before done."""

        def with_file(value: str, filename: str | None, done: Any) -> None:
            done(None, (value, filename))

        handler = Continuation(with_file, with_filename=True)
        assert handler.accepts_filename is True
        assert await handler.invoke("v", "a.json") == ("v", "a.json")


class TestAsHandler:
    """Tests for as_handler."""

    def test_handler_passes_through(self) -> None:
        """Handler instances are returned unchanged."""
        handler = Continuation(lambda value, done: done(None, value))
        assert as_handler(handler) is handler

    def test_callable_becomes_transform(self) -> None:
        """Callables are wrapped in Transform."""
        handler = as_handler(len)
        assert isinstance(handler, Transform)
        assert isinstance(handler, Handler)
        assert handler.fn is len

    def test_rejects_non_callables(self) -> None:
        """Other values raise TypeError."""
        with pytest.raises(TypeError, match="int"):
            as_handler(3)
