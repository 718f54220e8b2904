"""Rewards ledger persistence models.

- ledger_storage: keyed state of each ledger instance (protocol address,
  payment counter, payment records)
- ledger_domain_event: append-only audit log of published domain events
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from meshpay_rewards.models.base import Base, TimestampMixin


class LedgerStorageRecord(Base, TimestampMixin):
    """One key of one ledger's state.

    value_json holds the JSON encoding of the stored value. Keys are written
    by the ledger only; payment keys are never deleted.
    """

    __tablename__ = "ledger_storage"

    ledger_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    storage_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value_json: Mapped[str] = mapped_column(Text, nullable=False)


class DomainEventRecord(Base):
    """A persisted domain event."""

    __tablename__ = "ledger_domain_event"

    sequence: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[UUID] = mapped_column(unique=True, nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    ledger_id: Mapped[str] = mapped_column(String(64), nullable=False)
    correlation_id: Mapped[UUID] = mapped_column(nullable=False)
    payment_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("ix_ledger_domain_event_ledger_ts", "ledger_id", "timestamp"),
        Index("ix_ledger_domain_event_payment", "ledger_id", "payment_id"),
    )
