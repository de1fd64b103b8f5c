"""Domain models for Google Photos picker sessions and selections."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

DEFAULT_POLL_INTERVAL_MS = 2000
DEFAULT_POLL_TIMEOUT_MS = 120000


@dataclass(frozen=True)
class PollingConfig:
    """How often and for how long a picker session should be polled."""

    interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS


@dataclass(frozen=True)
class PickerSession:
    """Provider-owned picker session as last reported by the provider."""

    id: str
    picker_uri: str
    media_items_set: bool
    polling_config: PollingConfig = field(default_factory=PollingConfig)


@dataclass(frozen=True)
class SelectedPhoto:
    """A media item the user picked, normalized for journal use."""

    id: str
    media_item_id: str
    base_url: str
    thumbnail_url: str
    filename: str
    mime_type: str
    width: int
    height: int
    creation_time: datetime | None = None
    description: str | None = None


@dataclass(frozen=True)
class JournalPhotoAttachment:
    """Photo attached to a journal entry at a given position."""

    google_photo_id: str
    position: int
    media_item_id: str | None = None
    base_url: str | None = None
    thumbnail_url: str | None = None
    filename: str | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    caption: str | None = None
    id: UUID | None = None
    entry_id: UUID | None = None
