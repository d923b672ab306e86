"""
Local data store for Notekeeper.

Users, the current session user, notes and categories are each kept as one
JSON blob in the key-value store. Every operation reads the whole collection,
changes it in memory and writes it back with a single set().
"""

import asyncio
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from notekeeper.config import load_config
from notekeeper.kv import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore, StorageError
from notekeeper.models import (
    Category,
    Note,
    NoteDraft,
    NoteUpdate,
    Record,
    User,
    generate_id,
    utc_now,
)
from notekeeper.security import PasswordHasher

logger = logging.getLogger(__name__)

USERS_KEY = "@users"
CURRENT_USER_KEY = "@current_user"
NOTES_KEY = "@notes"
CATEGORIES_KEY = "@categories"

DEFAULT_CATEGORIES = ("Work", "Study", "Personal")

R = TypeVar("R", bound=BaseModel)


class LocalDataStore:
    """All persistence and lookup for accounts, notes and categories."""

    def __init__(self, kv: KeyValueStore, hasher: PasswordHasher | None = None):
        self.kv = kv
        self.hasher = hasher or PasswordHasher()
        # Serializes read-modify-write cycles within this process
        self._lock = asyncio.Lock()

    # -- collection helpers -------------------------------------------------

    async def _load(self, key: str, model: type[R]) -> list[R]:
        raw = await self.kv.get(key)
        if not raw:
            return []
        try:
            return TypeAdapter(list[model]).validate_json(raw)
        except ValueError as e:
            raise StorageError(f"Corrupt collection {key}: {e}") from e

    async def _save(self, key: str, records: list[Record]) -> None:
        await self.kv.set(key, json.dumps([r.to_blob() for r in records]))

    async def _set_current_user(self, user: User) -> None:
        await self.kv.set(CURRENT_USER_KEY, json.dumps(user.to_blob()))

    # -- users --------------------------------------------------------------

    async def get_users(self) -> list[User]:
        try:
            return await self._load(USERS_KEY, User)
        except StorageError as e:
            logger.error(f"Error getting users: {e}")
            return []

    async def register_user(self, email: str, password: str, username: str) -> bool:
        """Create an account and make it the current user. False if the email is taken."""
        try:
            password_hash = await asyncio.to_thread(self.hasher.hash_password, password)
            async with self._lock:
                users = await self._load(USERS_KEY, User)
                if any(u.email == email for u in users):
                    return False

                new_user = User(
                    id=generate_id(),
                    email=email,
                    username=username,
                    password_hash=password_hash,
                )
                users.append(new_user)
                await self._save(USERS_KEY, users)
                await self._set_current_user(new_user)

            await self.initialize_default_categories(new_user.id)
            logger.info(f"Registered user {new_user.id}")
            return True
        except StorageError as e:
            logger.error(f"Error registering user: {e}")
            return False

    async def login_user(self, email: str, password: str) -> User | None:
        """Return the matching user and remember it as current, or None."""
        try:
            users = await self._load(USERS_KEY, User)
            user = None
            for candidate in users:
                if candidate.email == email and await self.verify_password(candidate, password):
                    user = candidate
                    break
            if user:
                await self._set_current_user(user)
                logger.info(f"User {user.id} logged in")
                return user
            return None
        except StorageError as e:
            logger.error(f"Error logging in: {e}")
            return None

    async def get_current_user(self) -> User | None:
        try:
            raw = await self.kv.get(CURRENT_USER_KEY)
            return User.model_validate_json(raw) if raw else None
        except (StorageError, ValueError) as e:
            logger.error(f"Error getting current user: {e}")
            return None

    async def logout(self) -> None:
        await self.kv.remove(CURRENT_USER_KEY)
        logger.info("Logged out")

    async def update_user(
        self,
        user_id: str,
        email: str,
        username: str,
        password: str | None = None,
    ) -> bool:
        """
        Overwrite a user's email and username (and password, if given).

        The current-user record is a copy, so it is rewritten here when it
        points at the edited user.
        """
        try:
            password_hash = await asyncio.to_thread(self.hasher.hash_password, password) if password else None
            async with self._lock:
                users = await self._load(USERS_KEY, User)
                index = next((i for i, u in enumerate(users) if u.id == user_id), None)
                if index is None:
                    return False

                changes: dict[str, Any] = {"email": email, "username": username}
                if password_hash:
                    changes["password_hash"] = password_hash
                users[index] = users[index].model_copy(update=changes)

                await self._save(USERS_KEY, users)
                current = await self.get_current_user()
                if current and current.id == user_id:
                    await self._set_current_user(users[index])
            return True
        except StorageError as e:
            logger.error(f"Error updating user: {e}")
            return False

    async def verify_password(self, user: User, password: str) -> bool:
        return await asyncio.to_thread(self.hasher.verify_password, password, user.password_hash)

    # -- notes --------------------------------------------------------------

    async def get_notes(self, user_id: str) -> list[Note]:
        """A user's notes in stored order. Callers sort."""
        try:
            notes = await self._load(NOTES_KEY, Note)
            return [n for n in notes if n.user_id == user_id]
        except StorageError as e:
            logger.error(f"Error getting notes: {e}")
            return []

    async def get_note(self, note_id: str) -> Note | None:
        try:
            notes = await self._load(NOTES_KEY, Note)
            return next((n for n in notes if n.id == note_id), None)
        except StorageError as e:
            logger.error(f"Error getting note: {e}")
            return None

    async def add_note(self, draft: NoteDraft) -> Note:
        """Store a new note and return it with its generated id."""
        try:
            async with self._lock:
                notes = await self._load(NOTES_KEY, Note)
                new_note = Note(**draft.model_dump(), id=generate_id())
                notes.append(new_note)
                await self._save(NOTES_KEY, notes)
            return new_note
        except StorageError as e:
            logger.error(f"Error adding note: {e}")
            raise

    async def update_note(self, note_id: str, updates: NoteUpdate) -> bool:
        """Merge the set fields into a note and stamp it as edited."""
        try:
            async with self._lock:
                notes = await self._load(NOTES_KEY, Note)
                index = next((i for i, n in enumerate(notes) if n.id == note_id), None)
                if index is None:
                    return False

                merged = {**notes[index].model_dump(), **updates.changes(), "date_edited": utc_now()}
                notes[index] = Note.model_validate(merged)
                await self._save(NOTES_KEY, notes)
            return True
        except ValidationError as e:
            logger.error(f"Invalid note update for {note_id}: {e}")
            return False
        except StorageError as e:
            logger.error(f"Error updating note: {e}")
            return False

    async def delete_note(self, note_id: str) -> bool:
        """Remove a note. Deleting an unknown id still succeeds."""
        try:
            async with self._lock:
                notes = await self._load(NOTES_KEY, Note)
                await self._save(NOTES_KEY, [n for n in notes if n.id != note_id])
            return True
        except StorageError as e:
            logger.error(f"Error deleting note: {e}")
            return False

    # -- categories ---------------------------------------------------------

    async def get_categories(self, user_id: str) -> list[Category]:
        try:
            categories = await self._load(CATEGORIES_KEY, Category)
            return [c for c in categories if c.user_id == user_id]
        except StorageError as e:
            logger.error(f"Error getting categories: {e}")
            return []

    async def initialize_default_categories(self, user_id: str) -> None:
        """Add each default category the user does not already have (case-insensitive)."""
        try:
            async with self._lock:
                categories = await self._load(CATEGORIES_KEY, Category)
                existing = {c.name.lower() for c in categories if c.user_id == user_id}
                missing = [name for name in DEFAULT_CATEGORIES if name.lower() not in existing]
                if not missing:
                    return

                for name in missing:
                    categories.append(Category(id=generate_id(), name=name, user_id=user_id))
                await self._save(CATEGORIES_KEY, categories)
        except StorageError as e:
            logger.error(f"Error initializing categories: {e}")

    async def add_category(self, user_id: str, name: str) -> Category:
        """Append a category. Name uniqueness is the caller's job."""
        try:
            async with self._lock:
                categories = await self._load(CATEGORIES_KEY, Category)
                new_category = Category(id=generate_id(), name=name, user_id=user_id)
                categories.append(new_category)
                await self._save(CATEGORIES_KEY, categories)
            return new_category
        except StorageError as e:
            logger.error(f"Error adding category: {e}")
            raise

    async def delete_category(self, category_id: str) -> bool:
        """Remove a category. Notes filed under it keep their category name."""
        try:
            async with self._lock:
                categories = await self._load(CATEGORIES_KEY, Category)
                await self._save(CATEGORIES_KEY, [c for c in categories if c.id != category_id])
            return True
        except StorageError as e:
            logger.error(f"Error deleting category: {e}")
            return False

    # -- stats --------------------------------------------------------------

    async def get_stats(self, user_id: str) -> dict[str, Any]:
        """Get per-user notebook statistics."""
        notes = await self.get_notes(user_id)
        categories = await self.get_categories(user_id)
        by_category = Counter(n.category for n in notes)

        return {
            "total_notes": len(notes),
            "by_category": dict(by_category),
            "total_categories": len(categories),
            "edited_notes": sum(1 for n in notes if n.date_edited),
        }


def open_store(config: dict[str, Any] | None = None) -> LocalDataStore:
    """Build the store for the configured backend."""
    config = config or load_config()
    storage = config.get("storage", {})
    backend = storage.get("backend", "sqlite")

    if backend == "memory":
        kv: KeyValueStore = MemoryKeyValueStore()
    elif backend == "sqlite":
        path = storage.get("path")
        kv = SQLiteKeyValueStore(Path(path).expanduser() if path else None)
    else:
        raise ValueError(f"Unknown storage backend: {backend}")

    return LocalDataStore(kv)
