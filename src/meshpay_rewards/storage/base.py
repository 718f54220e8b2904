"""Keyed storage protocol.

All storage adapters must implement KeyedStorage. A storage instance is
scoped to exactly one ledger; values are JSON-compatible (str, int, dict).
"""

from __future__ import annotations

from typing import Any, Protocol

from meshpay_rewards.storage.keys import DataKey


class KeyedStorage(Protocol):
    """Protocol for durable keyed ledger storage."""

    ledger_id: str

    def get(self, key: DataKey, default: Any = None) -> Any:
        """Return the stored value, or default if the key is absent."""
        ...

    def set(self, key: DataKey, value: Any) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def has(self, key: DataKey) -> bool:
        """Return True if a value is stored under key."""
        ...
