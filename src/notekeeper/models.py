"""
Record types for Notekeeper.

Stored blobs use camelCase keys (userId, dateAdded, ...); attributes are
snake_case. Optional fields that are unset are left out of the blob.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    """Generate a unique record ID."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """Base for stored records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_blob(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(Record):
    id: str
    email: str
    username: str
    password_hash: str


class NoteDraft(Record):
    """A note before it has been stored (no id yet)."""

    user_id: str
    content: str
    category: str = ""
    title: str | None = None
    date_added: datetime = Field(default_factory=utc_now)
    date_edited: datetime | None = None

    @field_validator("date_added", "date_edited")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        # Naive timestamps would not compare against aware ones when sorting
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Note(NoteDraft):
    id: str


class NoteUpdate(BaseModel):
    """Partial note edit. Only fields that were explicitly set get merged."""

    title: str | None = None
    content: str | None = None
    category: str | None = None

    @field_validator("content", "category")
    @classmethod
    def not_cleared(cls, value: str | None) -> str | None:
        # Only the title is optional on a stored note
        if value is None:
            raise ValueError("cannot be cleared")
        return value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class Category(Record):
    id: str
    name: str
    user_id: str
