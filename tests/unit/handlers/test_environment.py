"""Tests for the env: handler."""

import pytest

from protocall import handlers


@pytest.fixture
def env_handler():
    return handlers.env()


class TestEnvHandler:
    """Tests for handlers.env."""

    @pytest.mark.asyncio
    async def test_lookup(self, env_handler, monkeypatch: pytest.MonkeyPatch) -> None:
        """Set variables are returned."""
        monkeypatch.setenv("FOO", "bar")
        assert await env_handler.invoke("FOO") == "bar"

    @pytest.mark.asyncio
    async def test_missing(self, env_handler, monkeypatch: pytest.MonkeyPatch) -> None:
        """Missing variables resolve to None."""
        monkeypatch.delenv("MISSING", raising=False)
        assert await env_handler.invoke("MISSING") is None

    @pytest.mark.asyncio
    async def test_integer_filter(self, env_handler, monkeypatch: pytest.MonkeyPatch) -> None:
        """|d converts to int."""
        monkeypatch.setenv("PORT", "8080")
        assert await env_handler.invoke("PORT|d") == 8080

    @pytest.mark.asyncio
    async def test_integer_filter_missing(
        self, env_handler, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """|d on a missing variable is None."""
        monkeypatch.delenv("PORT", raising=False)
        assert await env_handler.invoke("PORT|d") is None

    @pytest.mark.asyncio
    async def test_integer_filter_invalid(
        self, env_handler, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """|d on a non-integer fails."""
        monkeypatch.setenv("PORT", "eighty")
        with pytest.raises(ValueError):
            await env_handler.invoke("PORT|d")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("true", True), ("1", True), ("yes", True), ("", False), ("false", False), ("0", False)],
    )
    async def test_boolean_filters(
        self, env_handler, monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
    ) -> None:
        """|b and |!b follow the falsy set."""
        monkeypatch.setenv("FLAG", raw)
        assert await env_handler.invoke("FLAG|b") is expected
        assert await env_handler.invoke("FLAG|!b") is (not expected)

    @pytest.mark.asyncio
    async def test_boolean_filters_missing(
        self, env_handler, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A missing variable is false."""
        monkeypatch.delenv("FLAG", raising=False)
        assert await env_handler.invoke("FLAG|b") is False
        assert await env_handler.invoke("FLAG|!b") is True

    @pytest.mark.asyncio
    async def test_filter_must_be_suffix(
        self, env_handler, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A filter marker in the middle of the name is part of the name."""
        monkeypatch.setenv("A|dB", "raw")
        assert await env_handler.invoke("A|dB") == "raw"
