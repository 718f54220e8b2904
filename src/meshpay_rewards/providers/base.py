"""Base protocols and types for ledger collaborators.

The ledger never authenticates callers or moves value itself. It depends on
two narrow collaborators injected at construction:

- Authorizer: asserts that the current call was signed by an account.
- TransferService: moves an amount of a token between two accounts.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class TransferReceipt:
    """Result of a successful transfer."""

    transfer_id: str
    token: str
    source: str
    destination: str
    amount: int
    executed_at: datetime.datetime = field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )


class Authorizer(Protocol):
    """Protocol for call authorization.

    Implementations decide what "signed by" means (signature checks,
    session identity, host-provided auth entries).
    """

    def require_auth(self, account: str) -> None:
        """Assert the current call is authorized by account.

        Raises:
            NotAuthorizedError: if it is not. The whole ledger
                operation fails and no state changes.
        """
        ...


class TransferService(Protocol):
    """Protocol for value transfer adapters."""

    provider_name: str

    def transfer(self, token: str, source: str, destination: str, amount: int) -> TransferReceipt:
        """Move amount of token from source to destination.

        Fails as a unit: either the full amount moves or nothing does.

        Raises:
            TransferFailedError: on insufficient balance, missing
                authorization, or a rejected destination.
        """
        ...
