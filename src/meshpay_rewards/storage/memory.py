"""In-memory storage for tests and embedded use."""

from __future__ import annotations

import copy
import uuid
from typing import Any

from meshpay_rewards.storage.keys import DataKey


class InMemoryStorage:
    """Dictionary-backed KeyedStorage.

    Values are deep-copied on the way in and out, so callers can never
    mutate stored state through a returned object.
    """

    def __init__(self, ledger_id: str | None = None):
        self.ledger_id = ledger_id or str(uuid.uuid4())
        self._data: dict[str, Any] = {}

    def get(self, key: DataKey, default: Any = None) -> Any:
        if key.storage_key not in self._data:
            return default
        return copy.deepcopy(self._data[key.storage_key])

    def set(self, key: DataKey, value: Any) -> None:
        self._data[key.storage_key] = copy.deepcopy(value)

    def has(self, key: DataKey) -> bool:
        return key.storage_key in self._data

    def snapshot(self) -> dict[str, Any]:
        """Copy of everything stored, keyed by storage key string."""
        return copy.deepcopy(self._data)
