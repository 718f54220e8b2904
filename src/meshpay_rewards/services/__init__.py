"""Ledger services package."""

from meshpay_rewards.services.payment_ledger import (
    Payment,
    PaymentLedger,
)

__all__ = [
    "Payment",
    "PaymentLedger",
]
