"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from modsearch.config import AppConfig, _get_default_history_path


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self) -> None:
        """Should create config with default values."""
        config = AppConfig()

        assert isinstance(config.history_path, Path)
        assert config.history_path.name == "history.db"
        assert config.max_matches_per_file == 1000
        assert config.large_file_bytes == 10 * 1024 * 1024
        assert config.concurrency == 4
        assert config.history_limit == 10

    def test_custom_config(self) -> None:
        """Should create config with custom values."""
        config = AppConfig(
            history_path=Path("/custom/history.db"),
            max_matches_per_file=50,
            large_file_bytes=1024,
            concurrency=2,
            history_limit=5,
        )

        assert config.history_path == Path("/custom/history.db")
        assert config.max_matches_per_file == 50
        assert config.concurrency == 2
        assert config.history_limit == 5

    def test_resolve_history_path_absolute(self) -> None:
        """Should return absolute path as-is."""
        config = AppConfig(history_path=Path("/absolute/history.db"))

        assert config.resolve_history_path(base_dir=Path("/base")) == Path("/absolute/history.db")

    def test_resolve_history_path_relative_no_base(self) -> None:
        """Should return relative path when no base_dir provided."""
        config = AppConfig(history_path=Path("relative/history.db"))

        assert config.resolve_history_path(base_dir=None) == Path("relative/history.db")

    def test_resolve_history_path_relative_with_base(self) -> None:
        """Should join relative path with base_dir."""
        config = AppConfig(history_path=Path("relative/history.db"))

        assert config.resolve_history_path(base_dir=Path("/base")) == Path("/base/relative/history.db")

    def test_guard_policy(self) -> None:
        """Should build a guard from the configured limits."""
        guard = AppConfig(max_matches_per_file=7, large_file_bytes=99).guard_policy()

        assert guard.max_matches == 7
        assert guard.large_file_bytes == 99


class TestDefaultHistoryPath:
    """Test _get_default_history_path function."""

    def test_frozen_uses_documents(self) -> None:
        """Frozen builds always store history under the user's Documents."""
        with patch("modsearch.config.sys") as mock_sys:
            mock_sys.frozen = True
            path = _get_default_history_path()

        assert path == Path.home() / "Documents" / "ModSearch" / "history.db"

    def test_prefers_local_data_dir(self, tmp_path: Path, monkeypatch) -> None:
        """Running from source prefers an existing data/history.db."""
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "history.db").touch()
        monkeypatch.chdir(tmp_path)

        assert _get_default_history_path() == Path("data/history.db")

    def test_falls_back_to_documents(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert _get_default_history_path() == Path.home() / "Documents" / "ModSearch" / "history.db"
