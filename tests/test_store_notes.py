import asyncio
import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from notekeeper.models import NoteDraft, NoteUpdate
from notekeeper.store import NOTES_KEY


async def test_add_note_assigns_id_and_is_scoped_to_user(store):
    note = await store.add_note(NoteDraft(user_id="u1", content="hello"))

    assert note.id
    notes = await store.get_notes("u1")
    assert [n.content for n in notes] == ["hello"]
    assert notes[0].id == note.id
    assert await store.get_notes("u2") == []


async def test_get_notes_keeps_stored_order(store):
    for content in ("one", "two", "three"):
        await store.add_note(NoteDraft(user_id="u1", content=content))

    assert [n.content for n in await store.get_notes("u1")] == ["one", "two", "three"]


async def test_rapid_adds_get_distinct_ids(store):
    notes = [await store.add_note(NoteDraft(user_id="u1", content=str(i))) for i in range(20)]
    assert len({n.id for n in notes}) == 20


async def test_concurrent_adds_are_not_lost(store):
    await asyncio.gather(*(
        store.add_note(NoteDraft(user_id="u1", content=str(i))) for i in range(10)
    ))
    assert len(await store.get_notes("u1")) == 10


async def test_stored_blob_uses_camel_case_and_omits_missing_fields(store, kv):
    await store.add_note(NoteDraft(user_id="u1", content="hello", category="Work"))

    record = json.loads(kv.data[NOTES_KEY])[0]
    assert set(record) == {"id", "userId", "content", "category", "dateAdded"}


async def test_reads_blobs_written_by_original_app(store, kv):
    kv.data[NOTES_KEY] = json.dumps([{
        "id": "1700000000000",
        "userId": "u1",
        "content": "legacy",
        "category": "Work",
        "dateAdded": "2023-11-14T22:13:20.000Z",
    }])

    notes = await store.get_notes("u1")
    assert notes[0].content == "legacy"
    assert notes[0].date_added == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)


async def test_update_note_merges_and_stamps_edit_time(store):
    note = await store.add_note(NoteDraft(user_id="u1", title="T", content="hello", category="Work"))

    assert await store.update_note(note.id, NoteUpdate(content="bye")) is True

    updated = await store.get_note(note.id)
    assert updated.content == "bye"
    assert updated.title == "T"
    assert updated.category == "Work"
    assert updated.date_edited is not None
    assert updated.date_edited >= updated.date_added


async def test_update_note_can_clear_title(store):
    note = await store.add_note(NoteDraft(user_id="u1", title="T", content="hello"))

    await store.update_note(note.id, NoteUpdate(title=None))
    assert (await store.get_note(note.id)).title is None


async def test_update_unknown_note_fails_and_leaves_storage(store, kv):
    await store.add_note(NoteDraft(user_id="u1", content="hello"))
    before = kv.data[NOTES_KEY]

    assert await store.update_note("nonexistent", NoteUpdate(content="x")) is False
    assert kv.data[NOTES_KEY] == before


async def test_delete_note_is_idempotent(store, kv):
    keep = await store.add_note(NoteDraft(user_id="u1", content="keep"))
    gone = await store.add_note(NoteDraft(user_id="u1", content="gone"))

    assert await store.delete_note(gone.id) is True
    after_first = kv.data[NOTES_KEY]
    assert [n.id for n in await store.get_notes("u1")] == [keep.id]

    assert await store.delete_note(gone.id) is True
    assert kv.data[NOTES_KEY] == after_first


async def test_get_note_unknown_id(store):
    assert await store.get_note("missing") is None


async def test_stats(store):
    await store.register_user("a@example.com", "pw", "alice")
    user = await store.get_current_user()
    first = await store.add_note(NoteDraft(user_id=user.id, content="a", category="Work"))
    await store.add_note(NoteDraft(user_id=user.id, content="b", category="Work"))
    await store.add_note(NoteDraft(user_id=user.id, content="c", category="Study"))
    await store.update_note(first.id, NoteUpdate(content="aa"))

    stats = await store.get_stats(user.id)
    assert stats == {
        "total_notes": 3,
        "by_category": {"Work": 2, "Study": 1},
        "total_categories": 3,
        "edited_notes": 1,
    }


def test_note_update_rejects_clearing_content_or_category():
    with pytest.raises(ValidationError):
        NoteUpdate(content=None)
    with pytest.raises(ValidationError):
        NoteUpdate(category=None)
    assert NoteUpdate(title=None).changes() == {"title": None}


async def test_update_note_with_invalid_fields_reports_failure(store, kv):
    note = await store.add_note(NoteDraft(user_id="u1", content="hello"))
    before = kv.data[NOTES_KEY]

    unchecked = NoteUpdate.model_construct(content=None)
    assert await store.update_note(note.id, unchecked) is False
    assert kv.data[NOTES_KEY] == before
