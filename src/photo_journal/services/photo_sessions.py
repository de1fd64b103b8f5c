"""Capability interface for provider-owned photo picker sessions."""

from typing import Protocol

from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import PickerSession


class PhotoSessionClient(Protocol):
    """Interface for picker session endpoints of a photo provider.

    Implementations hold no per-user state: the credential travels with every
    call, and the session id is the only thing needed to resume polling.
    """

    async def create_session(
        self, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Allocate a new interactive picking session."""

    async def poll_session(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Return the current state of a session. Safe to call repeatedly."""

    async def list_media_items(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> list[dict[str, object]]:
        """Return the raw media items selected in a finalized session."""

    async def close(self) -> None:
        """Release underlying resources."""
