"""Tests for the authorizer and token provider stubs."""

import pytest

from meshpay_rewards.errors import NotAuthorizedError, TransferFailedError
from meshpay_rewards.providers.auth_stub import SignatureAuthorizer
from meshpay_rewards.providers.token_stub import InMemoryTokenProvider

TOKEN = "CTOKENXLM"


class TestSignatureAuthorizer:
    def test_unsigned_call_rejected(self):
        auth = SignatureAuthorizer()

        with pytest.raises(NotAuthorizedError, match="GSENDER"):
            auth.require_auth("GSENDER")

    def test_signed_block(self):
        auth = SignatureAuthorizer()

        with auth.signed_by("GSENDER", "GPAYER"):
            auth.require_auth("GSENDER")
            auth.require_auth("GPAYER")
            with pytest.raises(NotAuthorizedError):
                auth.require_auth("GRELAYER")

        assert auth.is_authorized("GSENDER") is False

    def test_nested_blocks(self):
        auth = SignatureAuthorizer()

        with auth.signed_by("GSENDER"):
            with auth.signed_by("GPAYER"):
                assert auth.is_authorized("GSENDER")
                assert auth.is_authorized("GPAYER")
            assert not auth.is_authorized("GPAYER")

    def test_standing_authorization(self):
        auth = SignatureAuthorizer("GSENDER")
        auth.authorize("GPAYER")

        auth.require_auth("GSENDER")
        auth.require_auth("GPAYER")

        auth.revoke("GSENDER")
        with pytest.raises(NotAuthorizedError):
            auth.require_auth("GSENDER")

    def test_checks_recorded(self):
        auth = SignatureAuthorizer("GSENDER")
        auth.require_auth("GSENDER")
        with pytest.raises(NotAuthorizedError):
            auth.require_auth("GOTHER")

        assert auth.checks == ["GSENDER", "GOTHER"]

    def test_ledger_checks_each_caller(self, initialized_ledger, authorizer, test_data):
        """Every mutating ledger call asks for exactly its caller."""
        authorizer.authorize(test_data.sender, test_data.payer, test_data.relayer)

        payment_id = initialized_ledger.create_payment(
            test_data.sender, test_data.recipient, test_data.broadcaster, test_data.relayer, 10_000
        )
        initialized_ledger.distribute_rewards(payment_id, 10_000, test_data.token, test_data.payer)
        initialized_ledger.record_and_distribute_rewards(
            test_data.sender,
            test_data.recipient,
            test_data.broadcaster,
            test_data.relayer,
            10_000,
            test_data.token,
        )

        assert authorizer.checks == [test_data.sender, test_data.payer, test_data.relayer]


class TestInMemoryTokenProvider:
    def test_mint_and_balance(self):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 1000)

        assert provider.balance(TOKEN, "GPAYER") == 1000
        assert provider.balance(TOKEN, "GOTHER") == 0
        assert provider.balance("COTHER", "GPAYER") == 0

    def test_transfer_moves_value(self):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 1000)

        receipt = provider.transfer(TOKEN, "GPAYER", "GBROADCASTER", 50)

        assert provider.balance(TOKEN, "GPAYER") == 950
        assert provider.balance(TOKEN, "GBROADCASTER") == 50
        assert receipt.amount == 50
        assert receipt.transfer_id.startswith("MEMTOKEN-")
        assert provider.transfers == [receipt]

    def test_total_supply_conserved(self):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 1000)

        provider.transfer(TOKEN, "GPAYER", "GA", 300)
        provider.transfer(TOKEN, "GA", "GB", 100)

        assert provider.total_supply(TOKEN) == 1000

    def test_insufficient_balance(self):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 10)

        with pytest.raises(TransferFailedError) as exc_info:
            provider.transfer(TOKEN, "GPAYER", "GA", 11)

        assert exc_info.value.reason == "insufficient balance: 10 available"
        assert provider.balance(TOKEN, "GPAYER") == 10
        assert provider.transfers == []

    @pytest.mark.parametrize("amount", [0, -5, True, 1.5])
    def test_invalid_amount(self, amount):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 10)

        with pytest.raises(TransferFailedError, match="positive integer"):
            provider.transfer(TOKEN, "GPAYER", "GA", amount)

    def test_frozen_accounts(self):
        provider = InMemoryTokenProvider()
        provider.mint(TOKEN, "GPAYER", 100)
        provider.freeze("GA")

        with pytest.raises(TransferFailedError, match="'GA' is frozen"):
            provider.transfer(TOKEN, "GPAYER", "GA", 10)

        provider.unfreeze("GA")
        provider.transfer(TOKEN, "GPAYER", "GA", 10)
        assert provider.balance(TOKEN, "GA") == 10

    def test_negative_mint_rejected(self):
        with pytest.raises(ValueError):
            InMemoryTokenProvider().mint(TOKEN, "GPAYER", -1)
