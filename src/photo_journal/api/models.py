"""Pydantic request models for the journal API."""

from datetime import datetime

from pydantic import BaseModel, Field

from photo_journal.domain.photos import JournalPhotoAttachment


class MoodPayload(BaseModel):
    """Mood picked in the editor."""

    emoji: str
    value: int = Field(ge=1, le=10)


class PersonRef(BaseModel):
    """Person mentioned in an entry."""

    name: str


class PhotoPayload(BaseModel):
    """Photo attachment as sent by the editor."""

    google_photo_id: str
    media_item_id: str | None = None
    base_url: str | None = None
    thumbnail_url: str | None = None
    filename: str | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    position: int = Field(default=0, ge=0)
    caption: str | None = None

    def to_attachment(self) -> JournalPhotoAttachment:
        return JournalPhotoAttachment(**self.model_dump())


class EntryCreate(BaseModel):
    """Body for creating a journal entry."""

    title: str = ""
    content: str | None = None
    date: datetime | None = None
    category: str | None = None
    mood: MoodPayload | None = None
    tags: list[str] = Field(default_factory=list)
    people: list[PersonRef] = Field(default_factory=list)
    location: str | None = None
    photos: list[PhotoPayload] | None = None


class EntryUpdate(BaseModel):
    """Body for a partial journal entry update."""

    title: str | None = None
    content: str | None = None
    date: datetime | None = None
    category: str | None = None
    mood: MoodPayload | None = None
    tags: list[str] | None = None
    people: list[PersonRef] | None = None
    location: str | None = None
    photos: list[PhotoPayload] | None = None


class PersonCreate(BaseModel):
    """Body for creating a person."""

    name: str = Field(min_length=1)
    google_contact_id: str | None = None
    avatar: str | None = None
    relationship: str | None = None


class CredentialsPayload(BaseModel):
    """Google tokens handed over by the external OAuth flow."""

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    expires_at: datetime | None = None
