"""Rewards ledger domain events package.

This package provides:
- Typed domain events for all ledger operations
- Event emitter for publishing events
- Event store for persistence and replay
"""

from meshpay_rewards.events.types import (
    # Base
    DomainEvent,
    EventMetadata,
    EventCategory,
    # Ledger Events
    LedgerInitialized,
    # Payment Events
    PaymentCreated,
    # Reward Events
    RewardPaid,
    BroadcasterRewardPaid,
    RelayerRewardPaid,
    ProtocolRewardPaid,
    PaymentRewardsDistributed,
)
from meshpay_rewards.events.emitter import (
    EventBatch,
    EventEmitter,
    Subscriber,
)
from meshpay_rewards.events.store import (
    EventStore,
    StoredEvent,
)

__all__ = [
    # Base
    "DomainEvent",
    "EventMetadata",
    "EventCategory",
    # Ledger Events
    "LedgerInitialized",
    # Payment Events
    "PaymentCreated",
    # Reward Events
    "RewardPaid",
    "BroadcasterRewardPaid",
    "RelayerRewardPaid",
    "ProtocolRewardPaid",
    "PaymentRewardsDistributed",
    # Emitter
    "EventBatch",
    "EventEmitter",
    "Subscriber",
    # Store
    "EventStore",
    "StoredEvent",
]
