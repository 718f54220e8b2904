"""Ledger storage package."""

from meshpay_rewards.storage.base import KeyedStorage
from meshpay_rewards.storage.keys import (
    PAYMENT_COUNT,
    PROTOCOL,
    DataKey,
    PaymentCountKey,
    PaymentKey,
    ProtocolKey,
)
from meshpay_rewards.storage.memory import InMemoryStorage
from meshpay_rewards.storage.sql import SqlStorage

__all__ = [
    "KeyedStorage",
    "DataKey",
    "PaymentCountKey",
    "PaymentKey",
    "ProtocolKey",
    "PAYMENT_COUNT",
    "PROTOCOL",
    "InMemoryStorage",
    "SqlStorage",
]
