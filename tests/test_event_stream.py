from __future__ import annotations

import asyncio
from typing import List, Tuple

import pytest

from colored_names.config.palette import ChatColor
from colored_names.service.event_stream import ColorEvent, EventKind, EventStream
from colored_names.service.types import PERMISSION_COLOR
from tests.helpers import ALICE, BOB, CAROL, expected_groups


def test_event_fills_participant_id() -> None:
    event = ColorEvent(EventKind.JOIN, participant=ALICE)

    assert event.participant_id == ALICE.id
    assert len(event.event_id) == 12


def test_events_are_handled_in_order(engine, presence) -> None:
    engine.enable()
    results: List[Tuple[EventKind, object]] = []

    async def on_result(event, result) -> None:
        results.append((event.kind, result))

    async def scenario() -> EventStream:
        stream = EventStream(engine)
        stream.on_result = on_result
        await stream.start()
        for participant in (ALICE, BOB, CAROL):
            presence.join(participant)
            await stream.enqueue(ColorEvent(EventKind.JOIN, participant=participant))
        await stream.join()
        presence.leave(BOB.id)
        await stream.enqueue(ColorEvent(EventKind.QUIT, participant_id=BOB.id))
        await stream.join()
        await stream.stop()
        return stream

    stream = asyncio.run(scenario())

    assert [kind for kind, _ in results] == [EventKind.JOIN] * 3 + [EventKind.QUIT]
    assert all(color in (ChatColor.RED, ChatColor.BLUE) for _, color in results[:3])
    assert BOB.id not in engine.colors
    assert engine.teams() == expected_groups(engine.colors.snapshot())
    assert stream.get_metrics()["events_handled"] == 4
    assert stream.get_metrics()["running"] is False


def test_failures_are_reported_and_worker_keeps_going(engine, presence) -> None:
    engine.enable()
    errors: List[Exception] = []

    async def on_error(event, error) -> None:
        errors.append(error)

    async def scenario() -> EventStream:
        stream = EventStream(engine)
        stream.on_error = on_error
        await stream.start()
        await stream.enqueue(ColorEvent(EventKind.JOIN))
        await stream.enqueue(ColorEvent(EventKind.QUIT))
        presence.join(ALICE)
        await stream.enqueue(ColorEvent(EventKind.JOIN, participant=ALICE))
        await stream.stop()
        return stream

    stream = asyncio.run(scenario())

    assert len(errors) == 2
    assert all(isinstance(error, ValueError) for error in errors)
    assert engine.color_of(ALICE.id) is not None
    assert stream.metrics == {"events_enqueued": 3, "events_handled": 1, "events_failed": 2}


def test_permission_reload_and_reroll_events(engine, presence) -> None:
    engine.enable()
    presence.join(ALICE, permissions=[])

    async def scenario() -> None:
        stream = EventStream(engine)
        await stream.start()
        await stream.enqueue(ColorEvent(EventKind.JOIN, participant=ALICE))
        await stream.join()
        assert engine.color_of(ALICE.id) is None

        presence.grant(ALICE.id, PERMISSION_COLOR)
        await stream.enqueue(ColorEvent(EventKind.PERMISSION_CHANGE, participant_id=ALICE.id))
        await stream.join()
        first = engine.color_of(ALICE.id)
        assert first is not None

        await stream.enqueue(ColorEvent(EventKind.CHANGE_COLOR, participant_id=ALICE.id))
        await stream.join()
        assert engine.color_of(ALICE.id) != first

        await stream.enqueue(ColorEvent(EventKind.RELOAD))
        await stream.stop()

    asyncio.run(scenario())

    assert engine.reload_count == 2
    assert engine.color_of(ALICE.id) is not None


def test_enqueue_after_stop_is_rejected(engine) -> None:
    engine.enable()

    async def scenario() -> None:
        stream = EventStream(engine)
        await stream.start()
        await stream.stop()
        with pytest.raises(RuntimeError):
            await stream.enqueue(ColorEvent(EventKind.RELOAD))

    asyncio.run(scenario())


def test_handled_event_history_is_bounded(engine) -> None:
    engine.enable()

    async def scenario() -> Tuple[EventStream, str]:
        stream = EventStream(engine, history_size=10)
        await stream.start()
        last = ""
        for i in range(50):
            last = await stream.enqueue(ColorEvent(EventKind.QUIT, participant_id=f"gone-{i}"))
        await stream.stop()
        return stream, last

    stream, last = asyncio.run(scenario())

    assert stream.metrics["events_handled"] == 50
    assert len(stream.recent) == 10
    assert stream.recent[-1] == last
