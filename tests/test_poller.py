"""Tests for the picker session poller."""

import asyncio

import pytest

from photo_journal.domain.errors import (
    NotAuthenticated,
    ProviderUnavailable,
    SessionNotFound,
)
from photo_journal.domain.photos import PollingConfig
from photo_journal.services.poller import PollerState, PollOutcome, SessionPoller
from tests.conftest import FakeClock, ScriptedSessionClient, session_state

_CONFIG = PollingConfig(interval_ms=1000, timeout_ms=10000)


def _poller(
    client: ScriptedSessionClient,
    clock: FakeClock,
    config: PollingConfig = _CONFIG,
    outcomes: list[PollOutcome] | None = None,
) -> SessionPoller:
    return SessionPoller(
        client,
        session_state("session-1", False, config),
        credentials=None,
        on_terminal=outcomes.append if outcomes is not None else None,
        clock=clock,
        sleep=clock.sleep,
    )


def test_poller_completes_on_fourth_poll() -> None:
    client = ScriptedSessionClient(
        polls=[
            session_state("session-1", False),
            session_state("session-1", False),
            session_state("session-1", False),
            session_state("session-1", True),
        ]
    )
    clock = FakeClock()
    outcomes: list[PollOutcome] = []
    poller = _poller(client, clock, outcomes=outcomes)

    outcome = asyncio.run(poller.run())

    assert outcome.state is PollerState.COMPLETED
    assert outcome.polls == 4
    assert outcome.session.media_items_set is True
    assert clock.sleeps == [1.0, 1.0, 1.0]
    assert outcomes == [outcome]
    assert poller.state is PollerState.COMPLETED


def test_poller_times_out_after_bounded_polls() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False)])
    clock = FakeClock()
    poller = _poller(
        client, clock, PollingConfig(interval_ms=2000, timeout_ms=4000)
    )

    outcome = asyncio.run(poller.run())

    assert outcome.state is PollerState.TIMED_OUT
    assert outcome.polls == 2
    assert client.poll_calls == 2
    assert clock.now == 4.0


def test_poller_never_sleeps_past_deadline() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False)])
    clock = FakeClock()
    poller = _poller(
        client, clock, PollingConfig(interval_ms=3000, timeout_ms=5000)
    )

    outcome = asyncio.run(poller.run())

    assert outcome.state is PollerState.TIMED_OUT
    assert clock.sleeps == [3.0, 2.0]
    assert outcome.polls == 2


def test_poller_discards_result_when_cancelled_mid_poll() -> None:
    clock = FakeClock()
    outcomes: list[PollOutcome] = []
    client = ScriptedSessionClient(
        polls=[session_state("session-1", False), session_state("session-1", True)]
    )
    poller = _poller(client, clock, outcomes=outcomes)

    def cancel_on_second_poll(calls: int) -> None:
        if calls == 2:
            poller.cancel()

    client.on_poll = cancel_on_second_poll

    outcome = asyncio.run(poller.run())

    assert outcome.state is PollerState.CANCELLED
    assert outcome.polls == 2
    assert outcome.session.media_items_set is False
    assert client.poll_calls == 2
    assert [item.state for item in outcomes] == [PollerState.CANCELLED]


def test_poller_retries_transient_errors() -> None:
    client = ScriptedSessionClient(
        polls=[
            ProviderUnavailable("503"),
            RuntimeError("socket closed"),
            session_state("session-1", True),
        ]
    )
    clock = FakeClock()

    outcome = asyncio.run(_poller(client, clock).run())

    assert outcome.state is PollerState.COMPLETED
    assert outcome.polls == 3


@pytest.mark.parametrize(
    "error", [SessionNotFound("gone"), NotAuthenticated("token expired")]
)
def test_poller_fails_on_fatal_errors(error: Exception) -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False), error])
    clock = FakeClock()

    outcome = asyncio.run(_poller(client, clock).run())

    assert outcome.state is PollerState.FAILED
    assert outcome.polls == 2
    assert client.poll_calls == 2
    assert outcome.error == str(error)
    assert outcome.session.id == "session-1"


def test_poller_terminal_state_is_final() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", True)])
    clock = FakeClock()
    outcomes: list[PollOutcome] = []
    poller = _poller(client, clock, outcomes=outcomes)

    first = asyncio.run(poller.run())
    cancelled = poller.cancel()
    second = asyncio.run(poller.run())

    assert cancelled is False
    assert first is second
    assert poller.state is PollerState.COMPLETED
    assert len(outcomes) == 1
    assert client.poll_calls == 1


def test_poller_cancel_before_start_skips_polling() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", True)])
    poller = _poller(client, FakeClock())

    assert poller.cancel() is True
    outcome = asyncio.run(poller.run())

    assert outcome.state is PollerState.CANCELLED
    assert client.poll_calls == 0


def test_poller_cancel_wakes_sleeping_poller() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False)])
    poller = SessionPoller(
        client,
        session_state("session-1", False, PollingConfig(60000, 120000)),
        credentials=None,
    )

    async def scenario() -> PollOutcome:
        task = asyncio.create_task(poller.run())
        while poller.poll_count == 0:
            await asyncio.sleep(0)
        assert poller.cancel() is True
        return await asyncio.wait_for(task, timeout=1)

    outcome = asyncio.run(scenario())

    assert outcome.state is PollerState.CANCELLED
    assert client.poll_calls == 1


def test_poller_task_cancellation_is_reported() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False)])
    outcomes: list[PollOutcome] = []
    poller = SessionPoller(
        client,
        session_state("session-1", False, PollingConfig(60000, 120000)),
        credentials=None,
        on_terminal=outcomes.append,
    )

    async def scenario() -> None:
        task = asyncio.create_task(poller.run())
        while poller.poll_count == 0:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert poller.state is PollerState.CANCELLED
    assert [item.state for item in outcomes] == [PollerState.CANCELLED]


def test_poller_rejects_concurrent_run() -> None:
    client = ScriptedSessionClient(polls=[session_state("session-1", False)])
    poller = SessionPoller(
        client,
        session_state("session-1", False, PollingConfig(60000, 120000)),
        credentials=None,
    )

    async def scenario() -> None:
        task = asyncio.create_task(poller.run())
        while poller.poll_count == 0:
            await asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            await poller.run()
        poller.cancel()
        await task

    asyncio.run(scenario())

    assert poller.state is PollerState.CANCELLED
