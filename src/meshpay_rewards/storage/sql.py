"""SQL-backed keyed storage.

Stores each key as one row of ledger_storage. Several ledgers can share a
database; rows are partitioned by ledger_id.

Notes:
- The storage flushes but never commits. Transaction boundaries belong to
  whoever owns the session (see database.get_session()).
"""

from __future__ import annotations

import json
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshpay_rewards.models.ledger import LedgerStorageRecord
from meshpay_rewards.storage.keys import DataKey


class SqlStorage:
    """KeyedStorage over a SQLAlchemy session."""

    def __init__(self, session: Session, ledger_id: str | None = None):
        self.session = session
        self.ledger_id = ledger_id or str(uuid.uuid4())

    def _row(self, key: DataKey) -> LedgerStorageRecord | None:
        return self.session.get(LedgerStorageRecord, (self.ledger_id, key.storage_key))

    def get(self, key: DataKey, default: Any = None) -> Any:
        row = self._row(key)
        if row is None:
            return default
        return json.loads(row.value_json)

    def set(self, key: DataKey, value: Any) -> None:
        value_json = json.dumps(value, sort_keys=True)
        row = self._row(key)
        if row is None:
            self.session.add(
                LedgerStorageRecord(
                    ledger_id=self.ledger_id,
                    storage_key=key.storage_key,
                    value_json=value_json,
                )
            )
        else:
            row.value_json = value_json
        self.session.flush()

    def has(self, key: DataKey) -> bool:
        return self._row(key) is not None

    def snapshot(self) -> dict[str, Any]:
        """Everything stored for this ledger, keyed by storage key string."""
        rows = self.session.scalars(
            select(LedgerStorageRecord).where(LedgerStorageRecord.ledger_id == self.ledger_id)
        ).all()
        return {row.storage_key: json.loads(row.value_json) for row in rows}
