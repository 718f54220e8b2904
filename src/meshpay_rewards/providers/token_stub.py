"""In-memory token provider for local development and testing.

Replace with an adapter for the settlement asset contract for production.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict

from meshpay_rewards.errors import TransferFailedError
from meshpay_rewards.providers.base import TransferReceipt

logger = logging.getLogger(__name__)


class InMemoryTokenProvider:
    """Stub token ledger.

    Tracks balances per (token, account). A transfer either moves the full
    amount or raises TransferFailedError and changes nothing. Frozen
    accounts reject incoming and outgoing transfers, which makes partial
    distribution failures easy to simulate.
    """

    provider_name = "memory_token"

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._frozen: set[str] = set()
        self.transfers: list[TransferReceipt] = []

    def mint(self, token: str, account: str, amount: int) -> None:
        """Credit account out of thin air."""
        if amount < 0:
            raise ValueError("Mint amount must be non-negative")
        self._balances[(token, account)] += amount

    def balance(self, token: str, account: str) -> int:
        return self._balances.get((token, account), 0)

    def total_supply(self, token: str) -> int:
        return sum(amount for (tok, _), amount in self._balances.items() if tok == token)

    def freeze(self, account: str) -> None:
        self._frozen.add(account)

    def unfreeze(self, account: str) -> None:
        self._frozen.discard(account)

    def transfer(self, token: str, source: str, destination: str, amount: int) -> TransferReceipt:
        """Move amount of token from source to destination."""
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            self._fail(token, source, destination, amount, "amount must be a positive integer")
        if source in self._frozen:
            self._fail(token, source, destination, amount, f"account '{source}' is frozen")
        if destination in self._frozen:
            self._fail(token, source, destination, amount, f"account '{destination}' is frozen")

        available = self.balance(token, source)
        if available < amount:
            self._fail(
                token,
                source,
                destination,
                amount,
                f"insufficient balance: {available} available",
            )

        self._balances[(token, source)] -= amount
        self._balances[(token, destination)] += amount

        receipt = TransferReceipt(
            transfer_id=f"MEMTOKEN-{uuid.uuid4().hex[:16].upper()}",
            token=token,
            source=source,
            destination=destination,
            amount=amount,
        )
        self.transfers.append(receipt)
        return receipt

    def _fail(self, token: str, source: str, destination: str, amount: int, reason: str) -> None:
        logger.debug("Stub transfer rejected: %s", reason)
        raise TransferFailedError(token, source, destination, amount, reason)
