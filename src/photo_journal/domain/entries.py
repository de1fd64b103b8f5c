"""Domain models for journal entries and people."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from photo_journal.domain.photos import JournalPhotoAttachment


@dataclass(frozen=True)
class Mood:
    """Mood picked for an entry, as an emoji and a 1-10 value."""

    emoji: str
    value: int


@dataclass(frozen=True)
class EntryStats:
    """Derived reading statistics for an entry."""

    word_count: int
    reading_time_seconds: int


@dataclass(frozen=True)
class JournalEntry:
    """A dated journal entry with its photo attachments."""

    id: UUID
    user_id: str
    title: str
    content: str | None
    date: datetime
    category: str
    mood: Mood | None
    tags: list[str]
    people: list[str]
    location: str | None
    stats: EntryStats
    updated_at: datetime | None
    photos: list[JournalPhotoAttachment] = field(default_factory=list)


@dataclass(frozen=True)
class Person:
    """Someone who can be mentioned in journal entries."""

    id: UUID
    user_id: str
    name: str
    google_contact_id: str | None = None
    avatar: str | None = None
    relationship: str | None = None
