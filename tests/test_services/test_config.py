"""Tests for application configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from revindex.config import Settings


class TestSettings:
    def test_default_settings(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.debug is False
        assert s.port == 8000
        assert s.database_url.startswith("sqlite+aiosqlite://")
        assert s.default_page_size == 100

    def test_custom_settings(self) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            debug=True,
            database_url="sqlite+aiosqlite:///test.db",
            default_page_size=10,
        )
        assert s.debug is True
        assert s.database_url == "sqlite+aiosqlite:///test.db"
        assert s.default_page_size == 10

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("DEBUG", "true")
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.port == 9000
        assert s.debug is True

    def test_port_range(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, port=0)  # type: ignore[call-arg]

    def test_default_page_size_bounded_by_max(self) -> None:
        with pytest.raises(ValidationError, match="must not exceed"):
            Settings(  # type: ignore[call-arg]
                _env_file=None, default_page_size=500, max_page_size=100
            )

    def test_settings_from_fixture(self, test_settings: Settings) -> None:
        assert test_settings.debug is True
        assert test_settings.database_url.endswith("test.db")
