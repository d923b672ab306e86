"""
Notebook actions for Notekeeper front ends.

Input checks that sit between a form (CLI command, MCP tool) and the store:
trimming, required fields, default category and duplicate category names.
"""

from notekeeper.models import Category, Note, NoteDraft, NoteUpdate, User
from notekeeper.query import ALL_CATEGORIES, filter_and_sort_notes
from notekeeper.store import LocalDataStore


def _clean_title(title: str | None) -> str | None:
    return (title or "").strip() or None


async def resolve_category(store: LocalDataStore, user: User, category: str | None) -> str:
    """Return the category to file a note under; the user's first one by default."""
    if category and category.strip():
        return category.strip()

    categories = await store.get_categories(user.id)
    if not categories:
        raise ValueError("Please select a category")
    return categories[0].name


async def create_note(
    store: LocalDataStore,
    user: User,
    content: str,
    title: str | None = None,
    category: str | None = None,
) -> Note:
    """Validate and store a new note for the user."""
    if not content.strip():
        raise ValueError("Note content is required")

    draft = NoteDraft(
        user_id=user.id,
        title=_clean_title(title),
        content=content.strip(),
        category=await resolve_category(store, user, category),
    )
    return await store.add_note(draft)


async def find_note(store: LocalDataStore, user: User, id_prefix: str) -> Note:
    """Look up one of the user's notes by id or unique id prefix."""
    id_prefix = id_prefix.strip().lower()
    if not id_prefix:
        raise ValueError("No note id provided")

    notes = await store.get_notes(user.id)
    matches = [n for n in notes if n.id.startswith(id_prefix)]
    if not matches:
        raise ValueError(f"Note not found: {id_prefix}")
    if len(matches) > 1:
        raise ValueError(f"Ambiguous note id: {id_prefix}")
    return matches[0]


async def edit_note(
    store: LocalDataStore,
    user: User,
    note_id: str,
    content: str | None = None,
    title: str | None = None,
    category: str | None = None,
) -> Note:
    """
    Apply an edit to one of the user's notes.

    Only the given fields change. An empty title clears it.
    """
    note = await find_note(store, user, note_id)

    changes: dict[str, str | None] = {}
    if content is not None:
        if not content.strip():
            raise ValueError("Note content is required")
        changes["content"] = content.strip()
    if title is not None:
        changes["title"] = _clean_title(title)
    if category is not None:
        if not category.strip():
            raise ValueError("Please select a category")
        changes["category"] = category.strip()

    if not await store.update_note(note.id, NoteUpdate(**changes)):
        raise ValueError("Failed to update note")

    updated = await store.get_note(note.id)
    if updated is None:
        raise ValueError("Failed to update note")
    return updated


async def remove_note(store: LocalDataStore, user: User, note_id: str) -> Note:
    note = await find_note(store, user, note_id)
    if not await store.delete_note(note.id):
        raise ValueError("Failed to delete note")
    return note


async def list_notes(
    store: LocalDataStore,
    user: User,
    category: str = ALL_CATEGORIES,
    query: str = "",
    order: str = "desc",
) -> list[Note]:
    notes = await store.get_notes(user.id)
    return filter_and_sort_notes(notes, category=category, query=query, order=order)


async def create_category(store: LocalDataStore, user: User, name: str) -> Category:
    """Add a category unless the user already has one with that name (any case)."""
    name = name.strip()
    if not name:
        raise ValueError("Please enter a category name")

    categories = await store.get_categories(user.id)
    if any(c.name.lower() == name.lower() for c in categories):
        raise ValueError("Category already exists")
    return await store.add_category(user.id, name)


async def remove_category(store: LocalDataStore, user: User, name_or_id: str) -> Category:
    """Delete one of the user's categories, matched by id or name (any case)."""
    key = name_or_id.strip()
    categories = await store.get_categories(user.id)
    category = next(
        (c for c in categories if c.id == key or c.name.lower() == key.lower()),
        None,
    )
    if category is None:
        raise ValueError(f"Category not found: {key}")
    if not await store.delete_category(category.id):
        raise ValueError("Failed to delete category")
    return category
