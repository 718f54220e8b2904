"""In-process authorizer for local development and testing.

Replace with an adapter that verifies signed authorization entries for
production.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from meshpay_rewards.errors import NotAuthorizedError


class SignatureAuthorizer:
    """Authorizer backed by a set of accounts that signed the current call.

    Usage:
        auth = SignatureAuthorizer()
        with auth.signed_by("GSENDER"):
            ledger.create_payment("GSENDER", ...)
    """

    def __init__(self, *accounts: str):
        self._standing: set[str] = set(accounts)
        self._signers: list[set[str]] = []
        # Every account require_auth() was asked about, in call order
        self.checks: list[str] = []

    def authorize(self, *accounts: str) -> None:
        """Treat accounts as signers of every call until revoked."""
        self._standing.update(accounts)

    def revoke(self, *accounts: str) -> None:
        """Remove standing authorization."""
        self._standing.difference_update(accounts)

    @contextmanager
    def signed_by(self, *accounts: str) -> Iterator[None]:
        """Authorize accounts for calls made inside the block."""
        self._signers.append(set(accounts))
        try:
            yield
        finally:
            self._signers.pop()

    def is_authorized(self, account: str) -> bool:
        if account in self._standing:
            return True
        return any(account in signers for signers in self._signers)

    def require_auth(self, account: str) -> None:
        self.checks.append(account)
        if not self.is_authorized(account):
            raise NotAuthorizedError(account, "missing signature")
