# This project was developed with assistance from AI tools.
"""Audit trail writer.

Append-only audit entries with a SHA-256 hash chain for tamper evidence.
A PostgreSQL advisory lock serializes hash computation across writers.
"""

import hashlib
import json
import logging
from collections.abc import Callable

from permit_db import AuditEvent
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from .events import BackgroundEventSink, DomainEvent

logger = logging.getLogger(__name__)

# Fixed advisory lock key for audit trail serialization.
AUDIT_LOCK_KEY = 900_001


def _compute_hash(event_id: int, timestamp: str, event_data: dict | None) -> str:
    """Compute SHA-256 hash of an audit event's key fields."""
    payload = f"{event_id}|{timestamp}|{json.dumps(event_data, sort_keys=True, default=str)}"
    return hashlib.sha256(payload.encode()).hexdigest()


async def write_audit_event(
    session: AsyncSession,
    *,
    event_type: str,
    user_id: str | None = None,
    entity_type: str | None = None,
    entity_id: int | str | None = None,
    application_id: int | None = None,
    event_data: dict | None = None,
) -> AuditEvent:
    """Write a single audit event with hash chain linkage.

    Acquires a PostgreSQL advisory lock (released on commit/rollback),
    then computes prev_hash from the most recent event.
    """
    await session.execute(text(f"SELECT pg_advisory_xact_lock({AUDIT_LOCK_KEY})"))

    latest_stmt = select(AuditEvent).order_by(AuditEvent.id.desc()).limit(1)
    result = await session.execute(latest_stmt)
    prev_event = result.scalar_one_or_none()

    if prev_event is not None:
        prev_hash = _compute_hash(prev_event.id, str(prev_event.timestamp), prev_event.event_data)
    else:
        prev_hash = "genesis"

    audit = AuditEvent(
        event_type=event_type,
        user_id=user_id,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        application_id=application_id,
        event_data=event_data,
        prev_hash=prev_hash,
    )
    session.add(audit)
    await session.flush()
    return audit


class AuditEventSink(BackgroundEventSink):
    """Record every domain event in the audit trail.

    Each delivery opens its own session from ``session_factory``; the
    request session has already committed by the time events go out.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
    ):
        super().__init__(max_attempts=max_attempts, backoff_seconds=backoff_seconds)
        self._session_factory = session_factory

    async def handle(self, event: DomainEvent) -> None:
        async with self._session_factory() as session:
            await write_audit_event(
                session,
                event_type=event.event_type.value,
                user_id=event.actor_id,
                entity_type=event.entity_type,
                entity_id=event.entity_id,
                application_id=event.application_id,
                event_data={
                    "occurred_at": event.occurred_at.isoformat(),
                    **event.metadata,
                },
            )
            await session.commit()
