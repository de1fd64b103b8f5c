"""Bounded-duration polling of a picker session until a terminal outcome."""

import asyncio
import contextlib
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum

from photo_journal.domain.errors import (
    NotAuthenticated,
    PhotoProviderError,
    SessionNotFound,
)
from photo_journal.domain.models import GoogleCredentials
from photo_journal.domain.photos import PickerSession
from photo_journal.services.photo_sessions import PhotoSessionClient

_logger = logging.getLogger(__name__)


class PollerState(str, Enum):
    """Lifecycle of a session poller."""

    IDLE = "IDLE"
    POLLING = "POLLING"
    COMPLETED = "COMPLETED"
    TIMED_OUT = "TIMED_OUT"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset(
    {
        PollerState.COMPLETED,
        PollerState.TIMED_OUT,
        PollerState.CANCELLED,
        PollerState.FAILED,
    }
)


@dataclass(frozen=True)
class PollOutcome:
    """Terminal result of a poller."""

    state: PollerState
    session: PickerSession
    polls: int
    error: str | None = None


class SessionPoller:
    """Polls one picker session until it completes, fails, times out or is cancelled.

    Polls are strictly sequential: the next one is only scheduled after the
    previous call resolves. ``ProviderUnavailable`` and other unexpected poll
    errors are logged and retried on the next tick, while ``SessionNotFound``
    and ``NotAuthenticated`` end the poller in ``FAILED``. Exactly one terminal
    outcome is produced; it is returned from ``run`` and passed once to
    ``on_terminal``.
    """

    def __init__(  # noqa: PLR0913
        self,
        client: PhotoSessionClient,
        session: PickerSession,
        credentials: GoogleCredentials | None,
        *,
        on_terminal: Callable[[PollOutcome], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._client = client
        self._session = session
        self._credentials = credentials
        self._on_terminal = on_terminal
        self._clock = clock
        self._sleep = sleep or self._wait
        self._state = PollerState.IDLE
        self._outcome: PollOutcome | None = None
        self._wake = asyncio.Event()
        self._polls = 0

    @property
    def session_id(self) -> str:
        return self._session.id

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def outcome(self) -> PollOutcome | None:
        return self._outcome

    @property
    def poll_count(self) -> int:
        return self._polls

    async def run(self) -> PollOutcome:
        """Poll until a terminal state is reached and return the outcome."""
        if self._outcome is not None:
            return self._outcome
        if self._state is not PollerState.IDLE:
            raise RuntimeError("Poller is already running")
        self._state = PollerState.POLLING
        config = self._session.polling_config
        interval = config.interval_ms / 1000
        deadline = self._clock() + config.timeout_ms / 1000
        _logger.info(
            "Picker polling started: session_id=%s interval_ms=%s timeout_ms=%s",
            self._session.id,
            config.interval_ms,
            config.timeout_ms,
        )
        try:
            while self._outcome is None:
                if self._clock() >= deadline:
                    self._finish(PollerState.TIMED_OUT)
                    break
                await self._tick()
                if self._outcome is not None:
                    break
                remaining = deadline - self._clock()
                await self._sleep(max(0.0, min(interval, remaining)))
        except asyncio.CancelledError:
            self._finish(PollerState.CANCELLED)
            raise
        return self._outcome

    def cancel(self) -> bool:
        """Stop polling. Returns true when this call moved the poller to CANCELLED."""
        return self._finish(PollerState.CANCELLED)

    async def _tick(self) -> None:
        self._polls += 1
        try:
            session = await self._client.poll_session(
                self._session.id, self._credentials
            )
        except (SessionNotFound, NotAuthenticated) as exc:
            _logger.warning(
                "Picker polling failed: session_id=%s error=%s",
                self._session.id,
                exc,
            )
            self._finish(PollerState.FAILED, error=str(exc))
            return
        except PhotoProviderError as exc:
            _logger.warning(
                "Picker poll failed, retrying: session_id=%s poll=%s error=%s",
                self._session.id,
                self._polls,
                exc,
            )
            return
        except Exception:
            _logger.exception(
                "Unexpected picker poll error",
                extra={"session_id": self._session.id, "poll": self._polls},
            )
            return
        if self._outcome is not None:
            return
        self._session = session
        if session.media_items_set:
            self._finish(PollerState.COMPLETED)

    def _finish(self, state: PollerState, error: str | None = None) -> bool:
        if self._outcome is not None:
            return False
        self._state = state
        self._outcome = PollOutcome(
            state=state, session=self._session, polls=self._polls, error=error
        )
        self._wake.set()
        _logger.info(
            "Picker polling finished: session_id=%s state=%s polls=%s",
            self._session.id,
            state.value,
            self._polls,
        )
        if self._on_terminal is not None:
            self._on_terminal(self._outcome)
        return True

    async def _wait(self, seconds: float) -> None:
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._wake.wait(), timeout=seconds)
