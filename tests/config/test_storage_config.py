from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path  # noqa: TC003

import pytest

from roomsync.config import storage


def test_get_storage_config_prefers_explicit_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("ROOMSYNC_DATA_DIR", str(custom))

    config = storage.get_storage_config()

    assert config.root() == custom.resolve()


def test_http_cache_path_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROOMSYNC_DATA_DIR", str(tmp_path / "data-dir"))

    path = storage.get_storage_config().http_cache_path()

    assert path == (tmp_path / "data-dir" / storage.HTTP_CACHE_FILENAME).resolve()
    assert path.parent.exists()


def test_reports_dir_lives_under_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("ROOMSYNC_DATA_DIR", str(tmp_path))

    reports = storage.get_storage_config().reports_dir()

    assert reports == tmp_path.resolve() / "reports"
    assert reports.is_dir()


@pytest.mark.skipif(os.name == "nt", reason="uses LOCALAPPDATA on Windows")
def test_default_data_dir_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("ROOMSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    config = storage.get_storage_config()

    assert config.data_dir == (tmp_path / storage.APP_DIR_NAME).resolve()


def test_timestamped_name_formats_moment() -> None:
    moment = datetime(2024, 3, 5, 7, 8, 9)  # noqa: DTZ001

    assert storage.timestamped_name("RoomComparison", ".html", moment=moment) == (
        "RoomComparison_20240305-070809.html"
    )
