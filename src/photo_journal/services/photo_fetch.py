"""Fetching and normalizing the photos picked in a completed session."""

import logging
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import urlsplit

from photo_journal.domain.errors import FetchFailed, NotAuthenticated, PhotoProviderError
from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import SelectedPhoto
from photo_journal.services.photo_sessions import PhotoSessionClient

_logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 200


@dataclass
class PhotoFetchService:
    """Retrieves a finalized selection and maps it to ``SelectedPhoto`` records."""

    client: PhotoSessionClient
    thumbnail_size: int = THUMBNAIL_SIZE

    async def fetch_selected(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> list[SelectedPhoto]:
        """Return the selected photos. An empty selection is not an error."""
        try:
            items = await self.client.list_media_items(session_id, credentials)
        except NotAuthenticated:
            raise
        except PhotoProviderError as exc:
            _logger.warning(
                "Picker selection fetch failed: session_id=%s error=%s",
                session_id,
                exc,
            )
            raise FetchFailed(
                f"Could not fetch selected photos for session {session_id}"
            ) from exc
        photos = [normalize_media_item(item, self.thumbnail_size) for item in items]
        _logger.info(
            "Picker selection fetched: session_id=%s photos=%s",
            session_id,
            len(photos),
        )
        return photos


def normalize_media_item(
    item: dict[str, object], thumbnail_size: int = THUMBNAIL_SIZE
) -> SelectedPhoto:
    """Map a provider media item to a ``SelectedPhoto``.

    Picker items nest file data under ``mediaFile``; Library-style items keep
    it at the top level with dimensions in ``mediaMetadata``. Both are read.
    """
    media_file = item.get("mediaFile") or {}
    metadata = media_file.get("mediaFileMetadata") or item.get("mediaMetadata") or {}
    base_url = str(media_file.get("baseUrl") or item.get("baseUrl") or "")
    item_id = str(item["id"])
    return SelectedPhoto(
        id=item_id,
        media_item_id=item_id,
        base_url=base_url,
        thumbnail_url=thumbnail_url(base_url, thumbnail_size),
        filename=str(media_file.get("filename") or item.get("filename") or "Unknown"),
        mime_type=str(media_file.get("mimeType") or item.get("mimeType") or ""),
        width=_to_int(metadata.get("width")),
        height=_to_int(metadata.get("height")),
        creation_time=_parse_time(
            item.get("createTime") or metadata.get("creationTime")
        ),
        description=item.get("description"),
    )


def thumbnail_url(base_url: str, size: int = THUMBNAIL_SIZE) -> str:
    """Derive a square thumbnail URL where the host supports resizing."""
    host = urlsplit(base_url).hostname or ""
    if host.endswith("googleusercontent.com"):
        return f"{base_url}=w{size}-h{size}-c"
    if host.endswith("unsplash.com"):
        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}w={size}&h={size}&fit=crop"
    return base_url


def _to_int(value: object) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _parse_time(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
