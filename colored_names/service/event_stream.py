"""
In-memory host event stream.

Delivers host events to the color engine one at a time using a single
asyncio worker, so mutations are serialized no matter how many producers
enqueue concurrently.

Usage:
    stream = EventStream(engine)
    stream.on_error = my_error_handler

    await stream.start()
    await stream.enqueue(ColorEvent(EventKind.JOIN, participant=player))
    await stream.join()       # wait until everything queued is handled
    await stream.stop()
"""

import asyncio
import logging
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, Optional

from colored_names.service.types import Participant

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Host events the engine reacts to."""
    JOIN = "join"
    QUIT = "quit"
    PERMISSION_CHANGE = "permission_change"
    CHANGE_COLOR = "change_color"
    RELOAD = "reload"


@dataclass
class ColorEvent:
    """A single host event."""
    kind: EventKind
    participant: Optional[Participant] = None
    participant_id: Optional[str] = None
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.participant_id is None and self.participant is not None:
            self.participant_id = self.participant.id


ResultCallback = Callable[[ColorEvent, Any], Awaitable[None]]
ErrorCallback = Callable[[ColorEvent, Exception], Awaitable[None]]


class EventStream:
    """
    Single-worker queue in front of a :class:`ColorEngine`.

    Handler exceptions are logged, counted and passed to ``on_error``; they
    never stop the worker.
    """

    def __init__(self, engine, queue_size: int = 1000, history_size: int = 100):
        self.engine = engine
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self.worker: Optional[asyncio.Task] = None
        self._shutdown = False

        self.on_result: Optional[ResultCallback] = None
        self.on_error: Optional[ErrorCallback] = None

        # ids of the most recently handled events
        self.recent: Deque[str] = deque(maxlen=history_size)
        self.metrics = {
            "events_enqueued": 0,
            "events_handled": 0,
            "events_failed": 0,
        }

    async def enqueue(self, event: ColorEvent) -> str:
        """Queue an event and return its id."""
        if self._shutdown:
            raise RuntimeError("Event stream is shut down")
        await self.queue.put(event)
        self.metrics["events_enqueued"] += 1
        logger.debug(f"[EventStream] Enqueued {event.kind.value} {event.event_id}")
        return event.event_id

    async def start(self) -> None:
        if self.worker is not None:
            return
        self._shutdown = False
        self.worker = asyncio.create_task(self._worker_loop())
        logger.info("[EventStream] Worker started")

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await self.queue.join()

    async def stop(self) -> None:
        """Let the worker finish the queue, then stop it."""
        if self.worker is None:
            return
        await self.queue.join()
        self._shutdown = True
        await self.worker
        self.worker = None
        logger.info(
            f"[EventStream] Worker stopped (handled {self.metrics['events_handled']}, "
            f"failed {self.metrics['events_failed']})"
        )

    async def _worker_loop(self) -> None:
        while not self._shutdown:
            try:
                event = await asyncio.wait_for(self.queue.get(), timeout=0.1)
            except asyncio.TimeoutError:
                continue

            try:
                result = self.dispatch(event)
                self.metrics["events_handled"] += 1
                self.recent.append(event.event_id)
                if self.on_result:
                    await self.on_result(event, result)
            except Exception as e:
                self.metrics["events_failed"] += 1
                logger.error(
                    f"[EventStream] {event.kind.value} {event.event_id} failed: {type(e).__name__}: {e}"
                )
                if self.on_error:
                    try:
                        await self.on_error(event, e)
                    except Exception as cb_err:
                        logger.error(f"[EventStream] Error callback failed: {cb_err}")
            finally:
                self.queue.task_done()

    def dispatch(self, event: ColorEvent) -> Any:
        """Route one event to the matching engine handler."""
        engine = self.engine
        if event.kind is EventKind.JOIN:
            if event.participant is None:
                raise ValueError("join event needs a participant")
            return engine.on_join(event.participant)
        if event.kind is EventKind.QUIT:
            return engine.on_quit(self._require_id(event))
        if event.kind is EventKind.PERMISSION_CHANGE:
            return engine.on_permission_change(self._require_id(event))
        if event.kind is EventKind.CHANGE_COLOR:
            return engine.change_color(self._require_id(event))
        if event.kind is EventKind.RELOAD:
            return engine.reload()
        raise ValueError(f"Unknown event kind: {event.kind}")

    @staticmethod
    def _require_id(event: ColorEvent) -> str:
        if not event.participant_id:
            raise ValueError(f"{event.kind.value} event needs a participant id")
        return event.participant_id

    def get_metrics(self) -> Dict[str, Any]:
        return {
            **self.metrics,
            "queue_size": self.queue.qsize(),
            "running": self.worker is not None,
        }
