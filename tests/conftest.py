"""Shared fixtures for the sync tests."""

from pathlib import Path

import pytest

from qiita_sync.config import Config
from tests.helpers import CONFIG_ENV_VARS


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Environment without any sync settings, run from an empty directory."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config pointing its history file at a temp directory."""
    return Config(
        microcms_domain="example",
        microcms_api_key="microcms-key",
        qiita_access_token="qiita-token",
        footer="FOOTER",
        sync_history_path=tmp_path / "sync-history.json",
    )
