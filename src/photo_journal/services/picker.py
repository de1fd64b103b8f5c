"""Picker workflow: create a session, poll it, and collect the selection."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from functools import partial

from photo_journal.domain.errors import PickerAlreadyWatched
from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import PickerSession, SelectedPhoto
from photo_journal.services.photo_fetch import PhotoFetchService
from photo_journal.services.photo_sessions import PhotoSessionClient
from photo_journal.services.poller import PollerState, SessionPoller

_logger = logging.getLogger(__name__)

WATCH_RETENTION_SECONDS = 600.0


@dataclass(frozen=True)
class PickerResult:
    """Terminal state of a picker interaction and, when completed, its photos."""

    session_id: str
    state: PollerState
    photos: list[SelectedPhoto]
    error: str | None = None


@dataclass
class PhotoPickerService:
    """Drives one picker interaction end to end."""

    client: PhotoSessionClient
    fetch_service: PhotoFetchService
    clock: Callable[[], float] = time.monotonic
    sleep: Callable[[float], Awaitable[None]] | None = None

    async def start(self, credentials: GoogleCredentials | None) -> PickerSession:
        """Create a picker session. ``NotAuthenticated`` propagates unchanged."""
        session = await self.client.create_session(credentials)
        _logger.info("Picker session created: session_id=%s", session.id)
        return session

    async def poll(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> PickerSession:
        """Poll a session once."""
        return await self.client.poll_session(session_id, credentials)

    async def fetch_selected(
        self, session_id: str, credentials: GoogleCredentials | None
    ) -> list[SelectedPhoto]:
        """Fetch the photos selected in a session."""
        return await self.fetch_service.fetch_selected(session_id, credentials)

    def poller(
        self, session: PickerSession, credentials: GoogleCredentials | None
    ) -> SessionPoller:
        """Build a poller for the session using this service's clock."""
        return SessionPoller(
            self.client,
            session,
            credentials,
            clock=self.clock,
            sleep=self.sleep,
        )

    async def complete(
        self, poller: SessionPoller, credentials: GoogleCredentials | None
    ) -> PickerResult:
        """Run the poller and fetch the selection when it completes."""
        outcome = await poller.run()
        photos: list[SelectedPhoto] = []
        if outcome.state is PollerState.COMPLETED:
            photos = await self.fetch_service.fetch_selected(
                outcome.session.id, credentials
            )
        return PickerResult(
            session_id=outcome.session.id,
            state=outcome.state,
            photos=photos,
            error=outcome.error,
        )

    async def pick(
        self,
        credentials: GoogleCredentials | None,
        on_session: Callable[[PickerSession], None] | None = None,
    ) -> PickerResult:
        """Run a full interaction. ``on_session`` receives the picker URI holder."""
        session = await self.start(credentials)
        if on_session is not None:
            on_session(session)
        return await self.complete(self.poller(session, credentials), credentials)


@dataclass(frozen=True)
class WatchStatus:
    """Snapshot of a server-side poller, as shown to the UI."""

    session_id: str
    user_id: str
    state: PollerState
    polls: int
    photos: list[SelectedPhoto] = field(default_factory=list)
    error: str | None = None


@dataclass
class _Watch:
    user_id: str
    poller: SessionPoller
    task: asyncio.Task
    finished_at: float | None = None


@dataclass
class PickerWatchRegistry:
    """Keeps at most one running poller per picker session.

    Finished watches stay readable for ``retention_seconds`` and are then
    dropped the next time the registry is used.
    """

    picker_service: PhotoPickerService
    retention_seconds: float = WATCH_RETENTION_SECONDS
    _watches: dict[str, _Watch] = field(default_factory=dict, init=False)

    def watch(
        self,
        session: PickerSession,
        credentials: GoogleCredentials | None,
        user_id: str,
    ) -> WatchStatus:
        """Start polling a session in the background."""
        self._evict_finished()
        existing = self._watches.get(session.id)
        if existing is not None and not existing.task.done():
            raise PickerAlreadyWatched(f"Picker session already watched: {session.id}")
        poller = self.picker_service.poller(session, credentials)
        task = asyncio.create_task(self.picker_service.complete(poller, credentials))
        task.add_done_callback(_log_watch_failure)
        watch = _Watch(user_id=user_id, poller=poller, task=task)
        task.add_done_callback(partial(self._mark_finished, watch))
        self._watches[session.id] = watch
        return self._status(session.id, watch)

    def status(self, session_id: str) -> WatchStatus | None:
        """Return the current status of a watched session, if any."""
        self._evict_finished()
        watch = self._watches.get(session_id)
        if watch is None:
            return None
        return self._status(session_id, watch)

    def list_statuses(self) -> list[WatchStatus]:
        """Return statuses of all known watches."""
        self._evict_finished()
        return [
            self._status(session_id, watch)
            for session_id, watch in self._watches.items()
        ]

    def cancel(self, session_id: str) -> WatchStatus | None:
        """Cancel a watch and forget it."""
        watch = self._watches.pop(session_id, None)
        if watch is None:
            return None
        watch.poller.cancel()
        return self._status(session_id, watch)

    async def close(self) -> None:
        """Cancel all pollers and wait for their tasks."""
        watches = list(self._watches.values())
        self._watches.clear()
        for watch in watches:
            watch.poller.cancel()
        await asyncio.gather(
            *(watch.task for watch in watches), return_exceptions=True
        )

    def _mark_finished(self, watch: _Watch, _task: asyncio.Task) -> None:
        watch.finished_at = self.picker_service.clock()

    def _evict_finished(self) -> None:
        now = self.picker_service.clock()
        expired = [
            session_id
            for session_id, watch in self._watches.items()
            if watch.finished_at is not None
            and now - watch.finished_at >= self.retention_seconds
        ]
        for session_id in expired:
            del self._watches[session_id]
        if expired:
            _logger.info("Evicted finished picker watches: count=%s", len(expired))

    @staticmethod
    def _status(session_id: str, watch: _Watch) -> WatchStatus:
        outcome = watch.poller.outcome
        photos: list[SelectedPhoto] = []
        error = outcome.error if outcome else None
        if watch.task.done() and not watch.task.cancelled():
            exc = watch.task.exception()
            if exc is not None:
                error = str(exc)
            else:
                photos = watch.task.result().photos
        return WatchStatus(
            session_id=session_id,
            user_id=watch.user_id,
            state=watch.poller.state,
            polls=watch.poller.poll_count,
            photos=photos,
            error=error,
        )


def _log_watch_failure(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.error("Picker watch failed: %s", exc, exc_info=exc)
