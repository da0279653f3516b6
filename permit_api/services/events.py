# This project was developed with assistance from AI tools.
"""Domain events emitted after a lifecycle change commits.

Subscribers (audit trail, review queue) are fire-and-forget: a failing
subscriber is logged and never fails the operation that emitted the event.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class EventType(str, enum.Enum):
    APPLICATION_CREATED = "application_created"
    APPLICATION_UPDATED = "application_updated"
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_CANCELLED = "application_cancelled"
    DOCUMENT_UPLOADED = "document_uploaded"
    DOCUMENT_DELETED = "document_deleted"


@dataclass(frozen=True)
class DomainEvent:
    event_type: EventType
    actor_id: str
    entity_type: str
    entity_id: int
    application_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class EventSink(Protocol):
    def emit(self, event: DomainEvent) -> None: ...


class EventDispatcher:
    """Fan an event out to every subscribed sink."""

    def __init__(self, sinks: list[EventSink] | None = None):
        self._sinks: list[EventSink] = list(sinks or [])

    def subscribe(self, sink: EventSink) -> None:
        self._sinks.append(sink)

    def emit(self, event: DomainEvent) -> None:
        for sink in self._sinks:
            try:
                sink.emit(event)
            except Exception:
                logger.exception(
                    "Event sink %s failed for %s",
                    type(sink).__name__,
                    event.event_type.value,
                )

    async def drain(self) -> None:
        """Wait for background deliveries of every sink that has them."""
        for sink in self._sinks:
            drain = getattr(sink, "drain", None)
            if drain is not None:
                await drain()


class BackgroundEventSink:
    """Deliver events from background tasks with bounded retries.

    Subclasses implement ``handle``; ``accepts`` narrows which events
    are scheduled at all.
    """

    def __init__(self, *, max_attempts: int = 3, backoff_seconds: float = 1.0):
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        # Track tasks so exceptions aren't silently lost
        self._tasks: set[asyncio.Task] = set()

    def accepts(self, event: DomainEvent) -> bool:
        return True

    async def handle(self, event: DomainEvent) -> None:
        raise NotImplementedError

    def emit(self, event: DomainEvent) -> None:
        if not self.accepts(event):
            return
        task = asyncio.create_task(
            self._deliver(event),
            name=f"{type(self).__name__}-{event.event_type.value}-{event.entity_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, event: DomainEvent) -> None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.handle(event)
                return
            except Exception:
                logger.warning(
                    "%s delivery of %s for %s %s failed (attempt %d/%d)",
                    type(self).__name__,
                    event.event_type.value,
                    event.entity_type,
                    event.entity_id,
                    attempt,
                    self.max_attempts,
                    exc_info=True,
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.backoff_seconds * attempt)
        logger.error(
            "%s gave up on %s for %s %s",
            type(self).__name__,
            event.event_type.value,
            event.entity_type,
            event.entity_id,
        )

    async def drain(self) -> None:
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


_dispatcher: EventDispatcher | None = None


def init_event_dispatcher(sinks: list[EventSink] | None = None) -> EventDispatcher:
    """Initialize the module-level dispatcher singleton."""
    global _dispatcher
    _dispatcher = EventDispatcher(sinks)
    return _dispatcher


def get_event_dispatcher() -> EventDispatcher:
    """Return the dispatcher; an empty one if none was initialized."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = EventDispatcher()
    return _dispatcher
