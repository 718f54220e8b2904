"""Domain event types for rewards ledger operations.

All events are:
- Immutable (frozen dataclasses)
- Typed with explicit payloads
- Traceable via metadata
- Serializable for persistence and replay

Every event carries a `topic`, the short name it is published under
(e.g. "reward_broadcaster").
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import UUID, uuid4


class EventCategory(str, Enum):
    """Event categories for routing and filtering."""

    LEDGER = "ledger"
    PAYMENT = "payment"
    REWARD = "reward"


@dataclass(frozen=True)
class EventMetadata:
    """Metadata attached to every domain event.

    Provides traceability and replay capability.
    """

    event_id: UUID
    timestamp: datetime
    ledger_id: str
    correlation_id: UUID  # Shared by all events of one ledger operation
    actor: str | None  # Account that authorized the operation
    source_service: str
    version: int = 1  # Schema version for evolution

    @classmethod
    def create(
        cls,
        ledger_id: str,
        correlation_id: UUID | None = None,
        actor: str | None = None,
        source_service: str = "rewards",
    ) -> EventMetadata:
        """Create metadata with auto-generated fields."""
        return cls(
            event_id=uuid4(),
            timestamp=datetime.now(timezone.utc),
            ledger_id=ledger_id,
            correlation_id=correlation_id or uuid4(),
            actor=actor,
            source_service=source_service,
        )


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    topic: ClassVar[str] = ""

    metadata: EventMetadata

    @property
    def event_type(self) -> str:
        """Event type name for routing."""
        return self.__class__.__name__

    @property
    def category(self) -> EventCategory:
        """Event category for filtering."""
        raise NotImplementedError("Subclasses must define category")

    def to_dict(self) -> dict[str, Any]:
        """Serialize event to dictionary."""
        return _serialize_dict(asdict(self))

    def to_json(self) -> str:
        """Serialize event to JSON string."""
        return json.dumps(self.to_dict(), default=str)


def _serialize_dict(obj: Any) -> Any:
    """Recursively serialize objects for JSON compatibility."""
    if isinstance(obj, dict):
        return {k: _serialize_dict(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_serialize_dict(v) for v in obj]
    elif isinstance(obj, UUID):
        return str(obj)
    elif isinstance(obj, (datetime, date)):
        return obj.isoformat()
    elif isinstance(obj, Decimal):
        return str(obj)
    elif isinstance(obj, Enum):
        return obj.value
    return obj


# =============================================================================
# Ledger Events
# =============================================================================


@dataclass(frozen=True)
class LedgerInitialized(DomainEvent):
    """The ledger was initialized with its protocol fee recipient."""

    topic: ClassVar[str] = "initialized"

    protocol_address: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.LEDGER


# =============================================================================
# Payment Events
# =============================================================================


@dataclass(frozen=True)
class PaymentCreated(DomainEvent):
    """A pending payment record was created; rewards not yet paid."""

    topic: ClassVar[str] = "payment_created"

    payment_id: int
    sender: str
    recipient: str
    broadcaster: str
    relayer: str
    gross_amount: int
    net_amount: int

    @property
    def category(self) -> EventCategory:
        return EventCategory.PAYMENT


# =============================================================================
# Reward Events
# =============================================================================


@dataclass(frozen=True)
class RewardPaid(DomainEvent):
    """A fee share was paid to one party."""

    payment_id: int
    recipient: str
    amount: int
    token: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.REWARD


@dataclass(frozen=True)
class BroadcasterRewardPaid(RewardPaid):
    """Broadcaster share paid."""

    topic: ClassVar[str] = "reward_broadcaster"


@dataclass(frozen=True)
class RelayerRewardPaid(RewardPaid):
    """Relayer share paid."""

    topic: ClassVar[str] = "reward_relayer"


@dataclass(frozen=True)
class ProtocolRewardPaid(RewardPaid):
    """Protocol share paid."""

    topic: ClassVar[str] = "reward_protocol"


@dataclass(frozen=True)
class PaymentRewardsDistributed(DomainEvent):
    """A payment was recorded and its rewards distributed in one call."""

    topic: ClassVar[str] = "rewards_distributed"

    payment_id: int
    sender: str
    recipient: str
    broadcaster: str
    relayer: str
    gross_amount: int
    net_amount: int
    broadcaster_fee: int
    relayer_fee: int
    protocol_fee: int
    token: str

    @property
    def category(self) -> EventCategory:
        return EventCategory.REWARD
