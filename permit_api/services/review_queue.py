# This project was developed with assistance from AI tools.
"""Forward submitted applications to the downstream review queue."""

import logging

import httpx

from .events import BackgroundEventSink, DomainEvent, EventType

logger = logging.getLogger(__name__)


class ReviewQueueSink(BackgroundEventSink):
    """POST ``application_submitted`` events to the review queue endpoint."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(max_attempts=max_attempts, backoff_seconds=backoff_seconds)
        self._url = url
        self._timeout = timeout
        self._transport = transport

    def accepts(self, event: DomainEvent) -> bool:
        return event.event_type == EventType.APPLICATION_SUBMITTED

    async def handle(self, event: DomainEvent) -> None:
        payload = {
            "application_id": event.entity_id,
            "submitted_by": event.actor_id,
            **event.metadata,
        }
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._url, json=payload)
            response.raise_for_status()
        logger.info("Application %s forwarded to review queue", event.entity_id)
