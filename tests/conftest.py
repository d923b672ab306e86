from datetime import datetime, timezone

import pytest

from notekeeper.kv import MemoryKeyValueStore, StorageError
from notekeeper.models import Note
from notekeeper.store import LocalDataStore


class FailingKeyValueStore(MemoryKeyValueStore):
    """Memory store that can be told to fail reads and/or writes."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_writes = False

    async def get(self, key):
        if self.fail_reads:
            raise StorageError("disk unavailable")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise StorageError("disk full")
        await super().set(key, value)

    async def remove(self, key):
        if self.fail_writes:
            raise StorageError("disk full")
        await super().remove(key)


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    return LocalDataStore(kv)


@pytest.fixture
def failing_kv():
    return FailingKeyValueStore()


@pytest.fixture
def failing_store(failing_kv):
    return LocalDataStore(failing_kv)


@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Point config and data directories at a temp dir."""
    monkeypatch.setenv("NOTEKEEPER_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.delenv("NOTEKEEPER_LOG_LEVEL", raising=False)
    return tmp_path


def make_note(note_id, content, category="Personal", day=1, title=None, user_id="u1"):
    return Note(
        id=note_id,
        user_id=user_id,
        title=title,
        content=content,
        category=category,
        date_added=datetime(2024, 1, day, tzinfo=timezone.utc),
    )
