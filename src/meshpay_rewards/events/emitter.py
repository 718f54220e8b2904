"""Synchronous delivery of ledger events.

Ledger operations publish through EventEmitter.batch(): events are queued
while the operation runs and delivered once the block exits cleanly. If the
block raises, the queue is dropped, so subscribers never see events of a
failed operation.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from meshpay_rewards.events.types import DomainEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[DomainEvent], Any]


class EventBatch:
    """Events queued by one ledger operation."""

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter
        # Subscriber failures, filled in when the batch is delivered
        self.errors: list[Exception] = []

    def add(self, event: DomainEvent) -> None:
        self._emitter.emit(event)


class EventEmitter:
    """Fans ledger events out to subscribers.

    on(RewardPaid, fn) matches subclasses too, so fn receives all three
    reward events. A subscriber that raises is logged and skipped; the
    remaining subscribers still get the event.

    Usage:
        emitter = EventEmitter()
        emitter.on(ProtocolRewardPaid, credit_treasury)
        EventStore(session).subscribe(emitter)
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[type[DomainEvent], Subscriber]] = []
        self._queue: list[DomainEvent] | None = None

    def on(self, event_type: type[DomainEvent], subscriber: Subscriber) -> None:
        """Subscribe to event_type and its subclasses."""
        self._subscribers.append((event_type, subscriber))

    def on_all(self, subscriber: Subscriber) -> None:
        self.on(DomainEvent, subscriber)

    def emit(self, event: DomainEvent) -> list[Exception]:
        """Deliver event now, or queue it when a batch is open.

        Returns the exceptions raised by subscribers.
        """
        if self._queue is not None:
            self._queue.append(event)
            return []
        return self._deliver(event)

    @contextmanager
    def batch(self) -> Iterator[EventBatch]:
        """Queue events until the block exits; drop them if it raises."""
        if self._queue is not None:
            raise RuntimeError("Event batches cannot be nested")

        batch = EventBatch(self)
        self._queue = []
        try:
            yield batch
        except BaseException:
            self._queue = None
            raise

        queued, self._queue = self._queue, None
        for event in queued:
            batch.errors.extend(self._deliver(event))

    def _deliver(self, event: DomainEvent) -> list[Exception]:
        errors: list[Exception] = []
        for event_type, subscriber in self._subscribers:
            if not isinstance(event, event_type):
                continue
            try:
                subscriber(event)
            except Exception as e:
                logger.exception(
                    "Subscriber %r failed on %s for ledger %s",
                    subscriber,
                    event.event_type,
                    event.metadata.ledger_id,
                )
                errors.append(e)
        return errors
