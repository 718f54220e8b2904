"""SQLAlchemy models."""

from meshpay_rewards.models.base import Base, TimestampMixin
from meshpay_rewards.models.ledger import DomainEventRecord, LedgerStorageRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "DomainEventRecord",
    "LedgerStorageRecord",
]
