"""Supabase implementations for journal entries and their photos."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from photo_journal.domain.entries import EntryStats, JournalEntry, Mood
from photo_journal.domain.photos import JournalPhotoAttachment
from photo_journal.services.entries import (
    JournalEntryRepository,
    JournalPhotoRepository,
)


@dataclass
class SupabaseJournalEntryRepository(JournalEntryRepository):
    """Supabase-backed repository for journal entries."""

    client: Client

    def create_entry(self, user_id: str, row: dict[str, object]) -> JournalEntry:
        """Insert an entry row and return it."""
        response = (
            self.client.table("journal_entries")
            .insert({"user_id": user_id, **row})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create journal entry")
        return parse_entry_row(response.data[0])

    def update_entry(self, entry_id: UUID, row: dict[str, object]) -> JournalEntry:
        """Update an entry row and return it."""
        response = (
            self.client.table("journal_entries")
            .update(row)
            .eq("id", str(entry_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update journal entry")
        return parse_entry_row(response.data[0])

    def get_entry(self, entry_id: UUID) -> JournalEntry | None:
        """Return an entry by id, if present."""
        response = (
            self.client.table("journal_entries")
            .select("*")
            .eq("id", str(entry_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_entry_row(response.data[0])

    def list_entries(self, user_id: str) -> list[JournalEntry]:
        """Return a user's entries, newest first."""
        response = (
            self.client.table("journal_entries")
            .select("*")
            .eq("user_id", user_id)
            .order("date", desc=True)
            .execute()
        )
        return [parse_entry_row(row) for row in response.data or []]

    def search_entries(self, user_id: str, query: str) -> list[JournalEntry]:
        """Case-insensitive search in title and content."""
        pattern = f"%{query}%"
        response = (
            self.client.table("journal_entries")
            .select("*")
            .eq("user_id", user_id)
            .or_(f"title.ilike.{pattern},content.ilike.{pattern}")
            .order("date", desc=True)
            .execute()
        )
        return [parse_entry_row(row) for row in response.data or []]

    def list_entries_by_category(
        self, user_id: str, category: str
    ) -> list[JournalEntry]:
        """Return entries in a category, newest first."""
        response = (
            self.client.table("journal_entries")
            .select("*")
            .eq("user_id", user_id)
            .eq("category", category)
            .order("date", desc=True)
            .execute()
        )
        return [parse_entry_row(row) for row in response.data or []]

    def list_entries_in_range(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[JournalEntry]:
        """Return entries dated within [start, end], newest first."""
        response = (
            self.client.table("journal_entries")
            .select("*")
            .eq("user_id", user_id)
            .gte("date", start.isoformat())
            .lte("date", end.isoformat())
            .order("date", desc=True)
            .execute()
        )
        return [parse_entry_row(row) for row in response.data or []]

    def delete_entry(self, entry_id: UUID) -> None:
        """Delete an entry row."""
        self.client.table("journal_entries").delete().eq("id", str(entry_id)).execute()


@dataclass
class SupabaseJournalPhotoRepository(JournalPhotoRepository):
    """Supabase-backed repository for entry photo attachments."""

    client: Client

    def list_photos(self, entry_ids: list[UUID]) -> list[JournalPhotoAttachment]:
        """Return attachments for the entries ordered by position."""
        if not entry_ids:
            return []
        response = (
            self.client.table("journal_photos")
            .select("*")
            .in_("entry_id", [str(entry_id) for entry_id in entry_ids])
            .order("position")
            .execute()
        )
        return [parse_photo_row(row) for row in response.data or []]

    def replace_photos(
        self, entry_id: UUID, photos: list[JournalPhotoAttachment]
    ) -> None:
        """Delete existing attachments and insert the new set."""
        self.delete_photos(entry_id)
        if not photos:
            return
        self.client.table("journal_photos").insert(
            [_photo_row(entry_id, photo) for photo in photos]
        ).execute()

    def delete_photos(self, entry_id: UUID) -> None:
        """Delete all attachments of an entry."""
        self.client.table("journal_photos").delete().eq(
            "entry_id", str(entry_id)
        ).execute()


def parse_entry_row(row: dict[str, object]) -> JournalEntry:
    """Parse a journal_entries row into a domain model."""
    raw_mood = row.get("mood")
    raw_stats = row.get("stats") or {}
    raw_updated = row.get("updated_at")
    return JournalEntry(
        id=UUID(str(row["id"])),
        user_id=str(row["user_id"]),
        title=str(row.get("title", "")),
        content=row.get("content"),
        date=datetime.fromisoformat(str(row["date"])),
        category=str(row.get("category") or "general"),
        mood=(
            Mood(emoji=str(raw_mood["emoji"]), value=int(raw_mood["value"]))
            if isinstance(raw_mood, dict)
            else None
        ),
        tags=[str(tag) for tag in row.get("tags") or []],
        people=[
            str(person["name"]) if isinstance(person, dict) else str(person)
            for person in row.get("people") or []
        ],
        location=row.get("location"),
        stats=EntryStats(
            word_count=int(raw_stats.get("word_count", 0)),
            reading_time_seconds=int(raw_stats.get("reading_time_seconds", 0)),
        ),
        updated_at=(
            datetime.fromisoformat(raw_updated)
            if isinstance(raw_updated, str) and raw_updated
            else None
        ),
    )


def parse_photo_row(row: dict[str, object]) -> JournalPhotoAttachment:
    """Parse a journal_photos row into a domain model."""
    return JournalPhotoAttachment(
        id=UUID(str(row["id"])) if row.get("id") else None,
        entry_id=UUID(str(row["entry_id"])),
        google_photo_id=str(row["google_photo_id"]),
        media_item_id=row.get("media_item_id"),
        base_url=row.get("base_url"),
        thumbnail_url=row.get("thumbnail_url"),
        filename=row.get("filename"),
        mime_type=row.get("mime_type"),
        width=row.get("width"),
        height=row.get("height"),
        position=int(row.get("position", 0)),
        caption=row.get("caption"),
    )


def _photo_row(entry_id: UUID, photo: JournalPhotoAttachment) -> dict[str, object]:
    return {
        "entry_id": str(entry_id),
        "google_photo_id": photo.google_photo_id,
        "media_item_id": photo.media_item_id,
        "base_url": photo.base_url,
        "thumbnail_url": photo.thumbnail_url,
        "filename": photo.filename,
        "mime_type": photo.mime_type,
        "width": photo.width,
        "height": photo.height,
        "position": photo.position,
        "caption": photo.caption,
    }
