"""Ledger error types.

Every operation either succeeds completely or raises exactly one of these.
None of them are retried by the ledger; retry policy belongs to the caller.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for all rewards ledger errors."""


class AlreadyInitializedError(LedgerError):
    """Raised when initialize() is called on an initialized ledger."""

    def __init__(self, ledger_id: str):
        self.ledger_id = ledger_id
        super().__init__(f"Ledger '{ledger_id}' is already initialized")


class ProtocolNotConfiguredError(LedgerError):
    """Raised when an operation needs the protocol address before initialize()."""

    def __init__(self, ledger_id: str):
        self.ledger_id = ledger_id
        super().__init__(f"Protocol address not set for ledger '{ledger_id}'")


class PaymentNotFoundError(LedgerError):
    """Raised when a payment id has no stored record."""

    def __init__(self, payment_id: int):
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} not found")


class PaymentAlreadyClaimedError(LedgerError):
    """Raised when rewards for a payment were already distributed."""

    def __init__(self, payment_id: int):
        self.payment_id = payment_id
        super().__init__(f"Rewards for payment {payment_id} were already distributed")


class NotAuthorizedError(LedgerError):
    """Raised by an authorizer when the call was not signed by an account."""

    def __init__(self, account: str, reason: str | None = None):
        self.account = account
        self.reason = reason
        msg = f"Call not authorized by '{account}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class TransferFailedError(LedgerError):
    """Raised by a transfer service when value could not be moved.

    When raised from a ledger operation, transfers that succeeded earlier in
    the same operation have already been sent back to their source:
    `reversals` holds the receipts of those return transfers. `completed`
    lists any earlier transfer whose return itself failed and is still
    outstanding.
    """

    def __init__(
        self,
        token: str,
        source: str,
        destination: str,
        amount: int,
        reason: str,
        completed: list[Any] | None = None,
    ):
        self.token = token
        self.source = source
        self.destination = destination
        self.amount = amount
        self.reason = reason
        self.completed: list[Any] = list(completed or [])
        self.reversals: list[Any] = []
        super().__init__(
            f"Transfer of {amount} {token} from '{source}' to '{destination}' failed: {reason}"
        )


class ArithmeticOverflowError(LedgerError):
    """Raised when a value leaves its fixed-width integer domain."""


class InvalidAmountError(LedgerError, ValueError):
    """Raised for negative or otherwise unusable amounts."""


class AmountMismatchError(InvalidAmountError):
    """Raised when a distribution amount differs from the one bound at creation."""

    def __init__(self, payment_id: int, expected: int, actual: int):
        self.payment_id = payment_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Payment {payment_id} was created for gross amount {expected}, got {actual}"
        )
