"""Event store for persistence and replay.

The event store provides:
- Persistent storage of domain events (audit trail for payouts)
- Idempotent writes (via event_id)
- Replay in publish order
- Filtering by payment, correlation, type, time range
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from meshpay_rewards.events.emitter import EventEmitter
from meshpay_rewards.events.types import DomainEvent, EventCategory
from meshpay_rewards.models.ledger import DomainEventRecord


@dataclass
class StoredEvent:
    """A persisted event record."""

    event_id: UUID
    event_type: str
    category: str
    ledger_id: str
    correlation_id: UUID
    payment_id: int | None
    timestamp: datetime
    payload: dict[str, Any]
    version: int

    @classmethod
    def from_event(cls, event: DomainEvent) -> StoredEvent:
        """Create stored event from domain event."""
        return cls(
            event_id=event.metadata.event_id,
            event_type=event.event_type,
            category=event.category.value,
            ledger_id=event.metadata.ledger_id,
            correlation_id=event.metadata.correlation_id,
            payment_id=getattr(event, "payment_id", None),
            timestamp=event.metadata.timestamp,
            payload=event.to_dict(),
            version=event.metadata.version,
        )


class EventStore:
    """Synchronous event store backed by SQL.

    Usage:
        store = EventStore(session)

        # Persist everything a ledger publishes
        store.subscribe(emitter)

        # Query events
        events = store.get_by_payment(ledger_id, payment_id=0)

        # Replay events
        for event in store.replay(ledger_id, after=cutoff_time):
            process(event)
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def subscribe(self, emitter: EventEmitter) -> None:
        """Persist every event the emitter publishes."""
        emitter.on_all(self.append)

    def append(self, event: DomainEvent) -> bool:
        """Append event to store.

        Returns True if event was stored, False if duplicate (idempotent).
        """
        existing = self._session.scalar(
            select(DomainEventRecord.sequence).where(
                DomainEventRecord.event_id == event.metadata.event_id
            )
        )
        if existing is not None:
            return False

        stored = StoredEvent.from_event(event)
        self._session.add(
            DomainEventRecord(
                event_id=stored.event_id,
                event_type=stored.event_type,
                category=stored.category,
                ledger_id=stored.ledger_id,
                correlation_id=stored.correlation_id,
                payment_id=stored.payment_id,
                timestamp=stored.timestamp,
                payload=json.dumps(stored.payload, default=str),
                version=stored.version,
            )
        )
        self._session.flush()
        return True

    def append_batch(self, events: list[DomainEvent]) -> int:
        """Append batch of events.

        Returns count of newly stored events (excludes duplicates).
        """
        stored_count = 0
        for event in events:
            if self.append(event):
                stored_count += 1
        return stored_count

    def get_by_id(self, event_id: UUID) -> StoredEvent | None:
        """Get event by ID."""
        row = self._session.scalar(
            select(DomainEventRecord).where(DomainEventRecord.event_id == event_id)
        )
        if row is None:
            return None
        return self._row_to_stored(row)

    def get_by_correlation(self, correlation_id: UUID) -> list[StoredEvent]:
        """Get all events of one ledger operation, in publish order."""
        query = (
            select(DomainEventRecord)
            .where(DomainEventRecord.correlation_id == correlation_id)
            .order_by(DomainEventRecord.sequence)
        )
        return [self._row_to_stored(row) for row in self._session.scalars(query)]

    def get_by_payment(self, ledger_id: str, payment_id: int) -> list[StoredEvent]:
        """Get every event that references a payment, in publish order."""
        query = (
            select(DomainEventRecord)
            .where(
                DomainEventRecord.ledger_id == ledger_id,
                DomainEventRecord.payment_id == payment_id,
            )
            .order_by(DomainEventRecord.sequence)
        )
        return [self._row_to_stored(row) for row in self._session.scalars(query)]

    def replay(
        self,
        ledger_id: str,
        after: datetime | None = None,
        before: datetime | None = None,
        event_types: list[str] | None = None,
        categories: list[EventCategory] | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> Iterator[StoredEvent]:
        """Replay events matching criteria.

        Yields events in publish order for rebuilding state
        or processing missed events.
        """
        query = self._filtered(
            select(DomainEventRecord), ledger_id, after, before, event_types, categories
        )
        query = query.order_by(DomainEventRecord.sequence).limit(limit).offset(offset)

        for row in self._session.scalars(query):
            yield self._row_to_stored(row)

    def count(
        self,
        ledger_id: str,
        after: datetime | None = None,
        before: datetime | None = None,
        event_types: list[str] | None = None,
        categories: list[EventCategory] | None = None,
    ) -> int:
        """Count events matching criteria."""
        query = self._filtered(
            select(func.count(DomainEventRecord.sequence)),
            ledger_id,
            after,
            before,
            event_types,
            categories,
        )
        return self._session.scalar(query) or 0

    def _filtered(
        self,
        query: Select[Any],
        ledger_id: str,
        after: datetime | None,
        before: datetime | None,
        event_types: list[str] | None,
        categories: list[EventCategory] | None,
    ) -> Select[Any]:
        query = query.where(DomainEventRecord.ledger_id == ledger_id)
        if after:
            query = query.where(DomainEventRecord.timestamp > after)
        if before:
            query = query.where(DomainEventRecord.timestamp < before)
        if event_types:
            query = query.where(DomainEventRecord.event_type.in_(event_types))
        if categories:
            query = query.where(DomainEventRecord.category.in_([c.value for c in categories]))
        return query

    def _row_to_stored(self, row: DomainEventRecord) -> StoredEvent:
        """Convert database row to StoredEvent."""
        return StoredEvent(
            event_id=row.event_id,
            event_type=row.event_type,
            category=row.category,
            ledger_id=row.ledger_id,
            correlation_id=row.correlation_id,
            payment_id=row.payment_id,
            timestamp=row.timestamp,
            payload=json.loads(row.payload),
            version=row.version,
        )
