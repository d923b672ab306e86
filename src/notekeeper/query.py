"""
Notes list query: category filter, keyword search and date ordering.
"""

from typing import Iterable

from notekeeper.models import Note

ALL_CATEGORIES = "All"
SORT_ORDERS = ("asc", "desc")


def matches_query(note: Note, words: list[str]) -> bool:
    """True if any word is a substring of the note's title + content."""
    text = f"{note.title or ''} {note.content}".lower()
    return any(word in text for word in words)


def filter_and_sort_notes(
    notes: Iterable[Note],
    category: str = ALL_CATEGORIES,
    query: str = "",
    order: str = "desc",
) -> list[Note]:
    """
    Apply the notes list view state to a user's notes.

    Args:
        notes: The user's notes, in any order
        category: Exact category name, or "All" for no filter
        query: Free text; a note matches if ANY word appears in it
        order: "asc" (oldest first) or "desc" (newest first)

    Returns:
        A new list; ties keep their input order
    """
    if order not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order: {order}")

    filtered = list(notes)

    if category != ALL_CATEGORIES:
        filtered = [n for n in filtered if n.category == category]

    if query.strip():
        words = query.lower().split()
        filtered = [n for n in filtered if matches_query(n, words)]

    filtered.sort(key=lambda n: n.date_added, reverse=(order == "desc"))
    return filtered
