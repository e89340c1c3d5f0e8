"""Tests for sync history persistence."""

import json
from pathlib import Path

import pytest

from qiita_sync.state import StateStore, SyncHistory, SyncRecord


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    return StateStore(tmp_path / "sync-history.json")


class TestStateStoreLoad:
    """Tests for loading history."""

    def test_missing_file_gives_empty_history(self, store: StateStore) -> None:
        history = store.load()

        assert history.articles == {}
        assert history.last_sync_time is None

    def test_corrupt_file_gives_empty_history(self, store: StateStore) -> None:
        store.path.write_text("{not json", encoding="utf-8")

        assert store.load().articles == {}

    def test_wrong_shape_gives_empty_history(self, store: StateStore) -> None:
        store.path.write_text(json.dumps({"articles": {"a": {"title": "no id"}}}), encoding="utf-8")

        assert store.load().articles == {}

    def test_bad_entry_does_not_drop_other_records(self, store: StateStore) -> None:
        """Only the unreadable entry is lost, so valid articles are not re-created."""
        store.path.write_text(json.dumps({
            "lastSyncTime": "2024-01-05T10:00:00.000Z",
            "articles": {
                "a": {
                    "qiitaId": "q1",
                    "title": "A",
                    "lastSyncedAt": "2024-01-05T09:59:00.000Z",
                    "microCMSUpdatedAt": "2024-01-04T00:00:00.000Z",
                },
                "b": {"title": "B"},
                "c": "not a record",
            },
        }), encoding="utf-8")

        history = store.load()

        assert set(history.articles) == {"a"}
        assert history.get("a").remote_id == "q1"
        assert history.last_sync_time == "2024-01-05T10:00:00.000Z"

    def test_reads_existing_history_file(self, store: StateStore) -> None:
        """Files written by earlier versions of the tool load unchanged."""
        store.path.write_text(json.dumps({
            "lastSyncTime": "2024-01-05T10:00:00.000Z",
            "articles": {
                "abc": {
                    "qiitaId": "q123",
                    "title": "Hello",
                    "lastSyncedAt": "2024-01-05T09:59:00.000Z",
                    "microCMSUpdatedAt": "2024-01-04T00:00:00.000Z",
                },
            },
        }), encoding="utf-8")

        history = store.load()

        assert history.last_sync_time == "2024-01-05T10:00:00.000Z"
        record = history.get("abc")
        assert record.remote_id == "q123"
        assert record.title == "Hello"
        assert record.last_synced_at == "2024-01-05T09:59:00.000Z"
        assert record.source_updated_at == "2024-01-04T00:00:00.000Z"


class TestStateStoreSave:
    """Tests for saving history."""

    def test_writes_persisted_field_names(self, store: StateStore) -> None:
        history = SyncHistory(last_sync_time="2024-01-05T10:00:00+00:00")
        history.articles["abc"] = SyncRecord(
            remote_id="q123",
            title="こんにちは",
            last_synced_at="2024-01-05T09:59:00+00:00",
            source_updated_at="2024-01-04T00:00:00.000Z",
        )

        store.save(history)

        data = json.loads(store.path.read_text(encoding="utf-8"))
        assert data == {
            "lastSyncTime": "2024-01-05T10:00:00+00:00",
            "articles": {
                "abc": {
                    "qiitaId": "q123",
                    "title": "こんにちは",
                    "lastSyncedAt": "2024-01-05T09:59:00+00:00",
                    "microCMSUpdatedAt": "2024-01-04T00:00:00.000Z",
                },
            },
        }

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        store = StateStore(tmp_path / "nested" / "dir" / "history.json")

        store.save(SyncHistory())

        assert store.path.exists()

    def test_save_then_load(self, store: StateStore) -> None:
        history = SyncHistory()
        history.articles["a"] = SyncRecord("q1", "A", "2024-01-01T00:00:00+00:00", None)

        store.save(history)
        loaded = store.load()

        assert loaded.get("a") == history.get("a")
        assert loaded.get("missing") is None
