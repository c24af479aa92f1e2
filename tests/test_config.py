"""Tests for application configuration."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from localrag.config import AppConfig, default_data_dir


class TestDefaultDataDir:
    """Test default_data_dir function."""

    def test_prefers_local_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "data" / "vector-db").mkdir(parents=True)

        assert default_data_dir() == Path("data/vector-db")

    def test_falls_back_to_user_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

        assert default_data_dir() == tmp_path / "home" / "Documents" / "LocalRAG" / "vector-db"

    def test_frozen_uses_user_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "data" / "vector-db").mkdir(parents=True)
        monkeypatch.setattr(sys, "frozen", True, raising=False)

        assert default_data_dir().parts[-3:] == ("Documents", "LocalRAG", "vector-db")


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "data" / "vector-db").mkdir(parents=True)

        config = AppConfig()

        assert config.data_dir == Path("data/vector-db")
        assert config.table_name == "documents"
        assert config.chunk_chars == 5000
        assert config.overlap == 500
        assert config.dimension == 384
        assert config.top_k == 5
        assert config.threshold == 0.3

    def test_custom_config(self) -> None:
        config = AppConfig(data_dir=Path("/custom/db"), table_name="notes", chunk_chars=800, overlap=100)

        assert config.data_dir == Path("/custom/db")
        assert config.table_name == "notes"
        assert config.chunk_chars == 800
        assert config.overlap == 100

    def test_resolve_absolute(self) -> None:
        config = AppConfig(data_dir=Path("/absolute/db"))
        assert config.resolve_data_dir(Path("/base")) == Path("/absolute/db")

    def test_resolve_relative_without_base(self) -> None:
        config = AppConfig(data_dir=Path("relative/db"))
        assert config.resolve_data_dir() == Path("relative/db")

    def test_resolve_relative_with_base(self) -> None:
        config = AppConfig(data_dir=Path("relative/db"))
        assert config.resolve_data_dir(Path("/base")) == Path("/base/relative/db")

    def test_home_relative_dir_is_expanded(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        config = AppConfig(data_dir=Path("~/tables"))

        assert config.data_dir == tmp_path / "tables"
        assert config.resolve_data_dir(Path("/base")) == tmp_path / "tables"
