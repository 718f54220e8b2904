"""Ledger collaborator adapters."""

from meshpay_rewards.providers.auth_stub import SignatureAuthorizer
from meshpay_rewards.providers.base import Authorizer, TransferReceipt, TransferService
from meshpay_rewards.providers.token_stub import InMemoryTokenProvider

__all__ = [
    "Authorizer",
    "TransferReceipt",
    "TransferService",
    "SignatureAuthorizer",
    "InMemoryTokenProvider",
]
