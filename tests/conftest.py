"""Shared test fixtures for the protocall test suite."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def write_files(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Factory fixture to create files under tmp_path.

    Usage:
        def test_something(write_files):
            root = write_files({
                "config/app.json": '{"port": 8080}',
                "data/key.txt": "secret",
            })
    """

    def _write_files(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            target = tmp_path / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return tmp_path

    return _write_files


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear configuration env vars and the settings cache around each test.

    This ensures test isolation for configuration tests.
    """
    from protocall.config import get_settings

    monkeypatch.delenv("PROTOCALL_CONFIG_DIR", raising=False)
    monkeypatch.delenv("PROTOCALL_ENV", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
