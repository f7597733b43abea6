"""Tests for sync/backup.py — backup snapshot naming and writing."""

import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from uniform_sync.errors import PersistenceError
from uniform_sync.sync.backup import BackupStore, backup_filename

TAKEN_AT = datetime(2024, 6, 1, 12, 30, 45, tzinfo=timezone.utc)


class TestBackupFilename:
    def test_layout(self):
        name = backup_filename("hero", "proj-1", TAKEN_AT)
        assert name == "hero__proj-1__2024-06-01T12-30-45-00-00.json"

    def test_unsafe_characters_replaced(self):
        name = backup_filename("a/b c", "p:1", TAKEN_AT)
        assert name.startswith("a-b-c__p-1__")
        assert "/" not in name
        assert ":" not in name

    def test_converted_to_utc(self):
        local = TAKEN_AT.astimezone(timezone(timedelta(hours=2)))
        assert backup_filename("x", "p", local) == backup_filename("x", "p", TAKEN_AT)

    def test_deterministic(self):
        assert backup_filename("x", "p", TAKEN_AT) == backup_filename(
            "x", "p", TAKEN_AT
        )


class TestBackupStore:
    def test_write_creates_directory_and_snapshot(self, tmp_path):
        store = BackupStore(tmp_path / "nested" / "backups")
        definition = {"id": "hero", "name": "Hero", "parameters": []}

        path = store.write("hero", "proj-1", definition, TAKEN_AT)

        assert path.parent == tmp_path / "nested" / "backups"
        assert path.name == backup_filename("hero", "proj-1", TAKEN_AT)
        snapshot = json.loads(path.read_text(encoding="utf-8"))
        assert snapshot == {
            "component_id": "hero",
            "project_id": "proj-1",
            "backed_up_at": "2024-06-01T12:30:45+00:00",
            "definition": definition,
        }

    def test_no_temp_files_left(self, tmp_path):
        store = BackupStore(tmp_path)
        store.write("hero", "proj-1", {"id": "hero"}, TAKEN_AT)
        assert [p.suffix for p in tmp_path.iterdir()] == [".json"]

    def test_existing_snapshot_not_overwritten(self, tmp_path):
        store = BackupStore(tmp_path)
        path = store.write("hero", "proj-1", {"id": "hero", "v": 1}, TAKEN_AT)

        with pytest.raises(PersistenceError):
            store.write("hero", "proj-1", {"id": "hero", "v": 2}, TAKEN_AT)

        assert json.loads(path.read_text(encoding="utf-8"))["definition"]["v"] == 1

    def test_default_timestamp_is_now(self, tmp_path):
        store = BackupStore(tmp_path)
        path = store.write("hero", "proj-1", {"id": "hero"})
        assert path.exists()
        assert path.name.startswith("hero__proj-1__")

    def test_write_error_raises_persistence_error(self, tmp_path):
        store = BackupStore(tmp_path)
        with patch(
            "uniform_sync.sync.backup.tempfile.mkstemp",
            side_effect=OSError("read-only file system"),
        ):
            with pytest.raises(PersistenceError, match="read-only"):
                store.write("hero", "proj-1", {"id": "hero"}, TAKEN_AT)

    def test_unicode_preserved(self, tmp_path):
        store = BackupStore(tmp_path)
        path = store.write("hero", "p", {"id": "hero", "name": "Héros ✓"}, TAKEN_AT)
        assert "Héros ✓" in path.read_text(encoding="utf-8")
