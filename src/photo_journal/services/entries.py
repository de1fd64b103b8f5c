"""Journal entry lifecycle and photo attachment ordering."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from photo_journal.domain.entries import EntryStats, JournalEntry
from photo_journal.domain.photos import JournalPhotoAttachment, SelectedPhoto

_logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"
WORDS_PER_MINUTE = 200


class JournalEntryRepository(Protocol):
    """Persistence interface for journal entries."""

    def create_entry(self, user_id: str, row: dict[str, object]) -> JournalEntry:
        """Insert an entry row and return it without photos."""

    def update_entry(self, entry_id: UUID, row: dict[str, object]) -> JournalEntry:
        """Update an entry row and return it without photos."""

    def get_entry(self, entry_id: UUID) -> JournalEntry | None:
        """Return an entry by id, if present."""

    def list_entries(self, user_id: str) -> list[JournalEntry]:
        """Return a user's entries, newest first."""

    def search_entries(self, user_id: str, query: str) -> list[JournalEntry]:
        """Return entries whose title or content contains the query."""

    def list_entries_by_category(
        self, user_id: str, category: str
    ) -> list[JournalEntry]:
        """Return entries in a category, newest first."""

    def list_entries_in_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[JournalEntry]:
        """Return entries dated within [start, end], newest first."""

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry row."""


class JournalPhotoRepository(Protocol):
    """Persistence interface for photos attached to entries."""

    def list_photos(self, entry_ids: list[UUID]) -> list[JournalPhotoAttachment]:
        """Return attachments for the entries ordered by position."""

    def replace_photos(
        self, entry_id: UUID, photos: list[JournalPhotoAttachment]
    ) -> None:
        """Replace all attachments of an entry."""

    def delete_photos(self, entry_id: UUID) -> None:
        """Delete all attachments of an entry."""


@dataclass
class JournalEntryService:
    """Application service for journal entries."""

    entry_repository: JournalEntryRepository
    photo_repository: JournalPhotoRepository
    now: Callable[[], datetime] = lambda: datetime.now(tz=UTC)

    def list_entries(self, user_id: str) -> list[JournalEntry]:
        """Return a user's entries with their photos."""
        return self._with_photos(self.entry_repository.list_entries(user_id))

    def get_entry(self, user_id: str, entry_id: UUID) -> JournalEntry | None:
        """Return one of the user's entries with its photos."""
        entry = self._owned_entry(user_id, entry_id)
        if entry is None:
            return None
        return self._with_photos([entry])[0]

    def create_entry(
        self,
        user_id: str,
        payload: dict[str, object],
        photos: list[JournalPhotoAttachment] | None = None,
    ) -> JournalEntry:
        """Create an entry, computing stats and a default title."""
        now = self.now()
        row = _to_row(payload)
        row.setdefault("date", now.isoformat())
        if not row.get("title"):
            row["title"] = default_title(datetime.fromisoformat(str(row["date"])))
        if not row.get("category"):
            row["category"] = DEFAULT_CATEGORY
        row["stats"] = _stats_row(compute_stats(row.get("content")))
        row["updated_at"] = now.isoformat()
        entry = self.entry_repository.create_entry(user_id, row)
        if photos:
            self.photo_repository.replace_photos(entry.id, normalize_positions(photos))
        _logger.info(
            "Journal entry created: entry_id=%s photos=%s", entry.id, len(photos or [])
        )
        return self._with_photos([entry])[0]

    def update_entry(
        self,
        user_id: str,
        entry_id: UUID,
        payload: dict[str, object],
        photos: list[JournalPhotoAttachment] | None = None,
    ) -> JournalEntry | None:
        """Update an entry. Attachments are replaced only when ``photos`` is given."""
        if self._owned_entry(user_id, entry_id) is None:
            return None
        row = _to_row(payload)
        if "content" in row:
            row["stats"] = _stats_row(compute_stats(row.get("content")))
        row["updated_at"] = self.now().isoformat()
        entry = self.entry_repository.update_entry(entry_id, row)
        if photos is not None:
            self.photo_repository.replace_photos(entry_id, normalize_positions(photos))
        return self._with_photos([entry])[0]

    def delete_entry(self, user_id: str, entry_id: UUID) -> bool:
        """Delete an entry together with its attachments."""
        if self._owned_entry(user_id, entry_id) is None:
            return False
        self.photo_repository.delete_photos(entry_id)
        self.entry_repository.delete_entry(entry_id)
        _logger.info("Journal entry deleted: entry_id=%s", entry_id)
        return True

    def search(self, user_id: str, query: str) -> list[JournalEntry]:
        """Search entries by title or content."""
        return self._with_photos(self.entry_repository.search_entries(user_id, query))

    def list_by_category(self, user_id: str, category: str) -> list[JournalEntry]:
        """Return entries in a category."""
        return self._with_photos(
            self.entry_repository.list_entries_by_category(user_id, category)
        )

    def list_by_date_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[JournalEntry]:
        """Return entries dated within a range."""
        return self._with_photos(
            self.entry_repository.list_entries_in_range(user_id, start, end)
        )

    def _owned_entry(self, user_id: str, entry_id: UUID) -> JournalEntry | None:
        entry = self.entry_repository.get_entry(entry_id)
        if entry is None or entry.user_id != user_id:
            return None
        return entry

    def _with_photos(self, entries: list[JournalEntry]) -> list[JournalEntry]:
        if not entries:
            return []
        photos = self.photo_repository.list_photos([entry.id for entry in entries])
        by_entry: dict[UUID, list[JournalPhotoAttachment]] = {}
        for photo in photos:
            by_entry.setdefault(photo.entry_id, []).append(photo)
        return [
            replace(
                entry,
                photos=sorted(
                    by_entry.get(entry.id, []), key=lambda photo: photo.position
                ),
            )
            for entry in entries
        ]


def compute_stats(content: object) -> EntryStats:
    """Count words and estimate reading time in whole minutes."""
    word_count = len(str(content).split()) if content else 0
    reading_minutes = math.ceil(word_count / WORDS_PER_MINUTE)
    return EntryStats(word_count=word_count, reading_time_seconds=reading_minutes * 60)


def default_title(value: datetime) -> str:
    """Title used when an entry is saved without one."""
    return f"Journal {value.day} {value:%B %Y}"


def normalize_positions(
    photos: list[JournalPhotoAttachment],
) -> list[JournalPhotoAttachment]:
    """Renumber attachments densely from 0, keeping their relative order."""
    ordered = sorted(enumerate(photos), key=lambda pair: (pair[1].position, pair[0]))
    return [
        replace(photo, position=index) for index, (_, photo) in enumerate(ordered)
    ]


def attachments_from_selection(
    selection: list[SelectedPhoto], start_position: int = 0
) -> list[JournalPhotoAttachment]:
    """Turn picked photos into attachments appended after ``start_position``."""
    return [
        JournalPhotoAttachment(
            google_photo_id=photo.id,
            media_item_id=photo.media_item_id,
            base_url=photo.base_url,
            thumbnail_url=photo.thumbnail_url,
            filename=photo.filename,
            mime_type=photo.mime_type,
            width=photo.width,
            height=photo.height,
            caption=photo.description,
            position=start_position + index,
        )
        for index, photo in enumerate(selection)
    ]


def _to_row(payload: dict[str, object]) -> dict[str, object]:
    row = dict(payload)
    raw_date = row.get("date")
    if isinstance(raw_date, datetime):
        row["date"] = raw_date.isoformat()
    elif "date" in row and raw_date is None:
        row.pop("date")
    if "people" in row:
        row["people"] = [
            person if isinstance(person, dict) else {"name": str(person)}
            for person in row["people"] or []
        ]
    return row


def _stats_row(stats: EntryStats) -> dict[str, int]:
    return {
        "word_count": stats.word_count,
        "reading_time_seconds": stats.reading_time_seconds,
    }
