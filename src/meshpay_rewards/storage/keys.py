"""Storage keys for ledger state.

The ledger only ever touches three kinds of key:

    ProtocolKey          -> protocol fee recipient address
    PaymentCountKey      -> next payment id / number of payments created
    PaymentKey(id)       -> payment record

Each key renders to a stable string used by the storage adapters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ProtocolKey:
    """Protocol fee recipient."""

    @property
    def storage_key(self) -> str:
        return "Protocol"


@dataclass(frozen=True)
class PaymentCountKey:
    """Payment counter."""

    @property
    def storage_key(self) -> str:
        return "PaymentCount"


@dataclass(frozen=True)
class PaymentKey:
    """Payment record by id."""

    payment_id: int

    def __post_init__(self) -> None:
        if isinstance(self.payment_id, bool) or not isinstance(self.payment_id, int):
            raise TypeError("payment_id must be an int")
        if self.payment_id < 0:
            raise ValueError("payment_id must be non-negative")

    @property
    def storage_key(self) -> str:
        return f"Payment:{self.payment_id}"


DataKey = Union[ProtocolKey, PaymentCountKey, PaymentKey]

PROTOCOL = ProtocolKey()
PAYMENT_COUNT = PaymentCountKey()
