"""In-memory picker client used when Google OAuth is not configured."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from photo_journal.domain.errors import (
    NotAuthenticated,
    ProviderUnavailable,
    SessionNotFound,
)
from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import PickerSession, PollingConfig
from photo_journal.services.photo_sessions import PhotoSessionClient


def _fixture_item(  # noqa: PLR0913
    item_id: str,
    photo: str,
    filename: str,
    created: str,
    width: int,
    height: int,
    description: str,
) -> dict[str, object]:
    return {
        "id": item_id,
        "createTime": f"{created}T12:00:00Z",
        "type": "PHOTO",
        "description": description,
        "mediaFile": {
            "baseUrl": f"https://images.unsplash.com/{photo}",
            "mimeType": "image/jpeg",
            "filename": filename,
            "mediaFileMetadata": {"width": width, "height": height},
        },
    }


FIXTURE_MEDIA_ITEMS: list[dict[str, object]] = [
    _fixture_item(
        "mock-media-1",
        "photo-1606787366850-de6330128bfc",
        "food-breakfast.jpg",
        "2024-08-24",
        1920,
        1080,
        "Breakfast",
    ),
    _fixture_item(
        "mock-media-2",
        "photo-1514888286974-6c03e2ca1dba",
        "cat-pet.jpg",
        "2024-08-24",
        1920,
        1280,
        "The cat",
    ),
    _fixture_item(
        "mock-media-3",
        "photo-1566479360739-a7e0b7a1c5ff",
        "sports-soccer.jpg",
        "2024-08-23",
        1920,
        1280,
        "Football practice",
    ),
    _fixture_item(
        "mock-media-4",
        "photo-1511895426328-dc8714191300",
        "family-park.jpg",
        "2024-08-23",
        1920,
        1280,
        "Family in the park",
    ),
    _fixture_item(
        "mock-media-5",
        "photo-1507003211169-0a1dd7228f2d",
        "portrait-dad.jpg",
        "2024-08-22",
        1920,
        1920,
        "Dad",
    ),
    _fixture_item(
        "mock-media-6",
        "photo-1544005313-94ddf0286df2",
        "portrait-mom.jpg",
        "2024-08-22",
        1920,
        1920,
        "Mom",
    ),
    _fixture_item(
        "mock-media-7",
        "photo-1503023345310-bd7c1de61c7d",
        "sunset-beach.jpg",
        "2024-08-20",
        1920,
        1080,
        "Sunset at the beach",
    ),
    _fixture_item(
        "mock-media-8",
        "photo-1472214103451-9374bd1c798e",
        "nature-landscape.jpg",
        "2024-08-20",
        1920,
        1080,
        "Landscape",
    ),
]


@dataclass
class _FixtureSession:
    session: PickerSession
    created_at: float = 0.0
    polls: int = 0
    selection: list[str] = field(default_factory=list)


@dataclass
class FixturePickerClient(PhotoSessionClient):
    """Deterministic stand-in for the Picker API.

    A session only finalizes when ``finalize`` is called, or after
    ``finalize_after_polls`` polls when that is set. Without either, repeated
    polls report the same state. Sessions are forgotten once their
    ``timeout_ms`` has elapsed, after which they raise ``SessionNotFound``.
    """

    polling_config: PollingConfig = field(default_factory=PollingConfig)
    finalize_after_polls: int | None = None
    require_credentials: bool = False
    selection_size: int = 5
    media_items: list[dict[str, object]] = field(
        default_factory=lambda: list(FIXTURE_MEDIA_ITEMS)
    )
    clock: Callable[[], float] = time.monotonic
    _sessions: dict[str, _FixtureSession] = field(default_factory=dict, init=False)

    async def create_session(
        self, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Create an in-memory session."""
        self._check_credentials(credentials)
        self._drop_expired()
        session_id = f"mock-session-{uuid4().hex}"
        session = PickerSession(
            id=session_id,
            picker_uri=f"https://photos.google.com/share/{session_id}",
            media_items_set=False,
            polling_config=self.polling_config,
        )
        self._sessions[session_id] = _FixtureSession(
            session=session, created_at=self.clock()
        )
        return session

    async def poll_session(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Return the session, finalizing it once the poll budget is spent."""
        self._check_credentials(credentials)
        state = self._get(session_id)
        state.polls += 1
        if (
            self.finalize_after_polls is not None
            and state.polls >= self.finalize_after_polls
            and not state.session.media_items_set
        ):
            self.finalize(session_id)
        return self._sessions[session_id].session

    async def list_media_items(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> list[dict[str, object]]:
        """Return the fixture items selected for the session."""
        self._check_credentials(credentials)
        state = self._get(session_id)
        if not state.session.media_items_set:
            raise ProviderUnavailable(f"Selection not finalized: {session_id}")
        by_id = {str(item["id"]): item for item in self.media_items}
        return [by_id[item_id] for item_id in state.selection if item_id in by_id]

    async def close(self) -> None:
        """Nothing to release."""
        return None

    def finalize(self, session_id: str, media_item_ids: list[str] | None = None) -> None:
        """Simulate the user finishing their selection."""
        state = self._get(session_id)
        if media_item_ids is None:
            media_item_ids = [
                str(item["id"]) for item in self.media_items[: self.selection_size]
            ]
        state.selection = list(media_item_ids)
        state.session = PickerSession(
            id=state.session.id,
            picker_uri=state.session.picker_uri,
            media_items_set=True,
            polling_config=state.session.polling_config,
        )

    def expire(self, session_id: str) -> None:
        """Forget a session, as the provider does once it expires."""
        self._sessions.pop(session_id, None)

    def _get(self, session_id: str) -> _FixtureSession:
        state = self._sessions.get(session_id)
        if state is not None and self._expired(state):
            del self._sessions[session_id]
            state = None
        if state is None:
            raise SessionNotFound(f"Picker session not found: {session_id}")
        return state

    def _expired(self, state: _FixtureSession) -> bool:
        timeout = state.session.polling_config.timeout_ms / 1000
        return self.clock() - state.created_at >= timeout

    def _drop_expired(self) -> None:
        for session_id, state in list(self._sessions.items()):
            if self._expired(state):
                del self._sessions[session_id]

    def _check_credentials(self, credentials: GoogleCredentials | None) -> None:
        if self.require_credentials and (
            credentials is None or not credentials.is_valid()
        ):
            raise NotAuthenticated("No valid Google access token available")
