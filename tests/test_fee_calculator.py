"""Tests for the fee calculator.

Tests verify:
1. Fixed 0.5% / 0.1% / 0.4% split with per-component truncation
2. Conservation: net + fees == gross
3. Rejection of negative, non-integer and out-of-range inputs
4. Reverse (gross-up) calculation
5. Fee breakdown formatting
"""

import pytest
from hypothesis import given, strategies as st

from meshpay_rewards.calculators.fees import (
    I128_MAX,
    FeeCalculator,
    FeeSplit,
    calculate_fees,
    calculate_gross_amount,
    format_fee_breakdown,
)
from meshpay_rewards.config import FeeSchedule
from meshpay_rewards.errors import ArithmeticOverflowError, InvalidAmountError


class TestCalculateFees:
    """Test the default fee split."""

    def test_ten_thousand_units(self):
        """10_000 splits into 9900 / 50 / 10 / 40."""
        assert calculate_fees(10_000) == (9900, 50, 10, 40)

    def test_result_fields(self):
        """FeeSplit exposes named fields and totals."""
        split = calculate_fees(10_000)

        assert isinstance(split, FeeSplit)
        assert split.net == 9900
        assert split.broadcaster_fee == 50
        assert split.relayer_fee == 10
        assert split.protocol_fee == 40
        assert split.total_fee == 100
        assert split.gross == 10_000

    def test_sub_unit_fees_truncate_to_zero(self):
        """A single unit pays no fees."""
        assert calculate_fees(1) == (1, 0, 0, 0)

    def test_zero_amount(self):
        assert calculate_fees(0) == (0, 0, 0, 0)

    def test_fees_truncated_independently(self):
        """Each fee truncates on its own, not via the combined rate.

        At 199 units the combined 1% rate would truncate to a fee of 1,
        but every individual component truncates to 0.
        """
        assert 199 * 100 // 10_000 == 1
        assert calculate_fees(199) == (199, 0, 0, 0)

    def test_partial_truncation(self):
        """At 200 units only the broadcaster share reaches one unit."""
        assert calculate_fees(200) == (199, 1, 0, 0)

    def test_deterministic(self):
        """Same input, same output."""
        assert calculate_fees(123_456_789) == calculate_fees(123_456_789)

    def test_negative_amount_rejected(self):
        with pytest.raises(InvalidAmountError, match="must not be negative"):
            calculate_fees(-10_000)

    @pytest.mark.parametrize("bad", [1.5, "100", None, True])
    def test_non_integer_rejected(self, bad):
        with pytest.raises(TypeError):
            calculate_fees(bad)

    def test_amount_outside_i128_overflows(self):
        with pytest.raises(ArithmeticOverflowError):
            calculate_fees(I128_MAX + 1)

    def test_fee_product_overflow(self):
        """gross * 50 must fit in 128 bits."""
        with pytest.raises(ArithmeticOverflowError):
            calculate_fees(I128_MAX)

    def test_largest_safe_amount(self):
        gross = I128_MAX // 50
        split = calculate_fees(gross)
        assert split.gross == gross

    def test_custom_schedule(self):
        calc = FeeCalculator(FeeSchedule(broadcaster_bps=100, relayer_bps=0, protocol_bps=0))
        assert calc.calculate_fees(10_000) == (9900, 100, 0, 0)


class TestFeeProperties:
    """Property-based checks over the valid input range."""

    @given(st.integers(min_value=0, max_value=I128_MAX // 50))
    def test_conservation(self, gross):
        split = calculate_fees(gross)
        assert split.net + split.broadcaster_fee + split.relayer_fee + split.protocol_fee == gross

    @given(st.integers(min_value=0, max_value=10**30))
    def test_components_follow_rates(self, gross):
        split = calculate_fees(gross)
        assert split.broadcaster_fee == gross * 50 // 10_000
        assert split.relayer_fee == gross * 10 // 10_000
        assert split.protocol_fee == gross * 40 // 10_000
        assert split.net >= 0

    @given(st.integers(min_value=0, max_value=10**30))
    def test_total_fee_never_exceeds_combined_rate(self, gross):
        """Independent truncation can only under-charge, by at most 2 units."""
        combined = gross * 100 // 10_000
        total = calculate_fees(gross).total_fee
        assert combined - 2 <= total <= combined


class TestGrossAmount:
    """Test the reverse calculation."""

    def test_gross_for_round_net(self):
        """9997 is the smallest gross that leaves 9900 net."""
        assert calculate_gross_amount(9900) == 9997
        assert calculate_fees(9997).net == 9900
        assert calculate_fees(9996).net < 9900

    def test_zero(self):
        assert calculate_gross_amount(0) == 0

    def test_small_amounts_carry_no_fee(self):
        assert calculate_gross_amount(150) == 150

    def test_negative_rejected(self):
        with pytest.raises(InvalidAmountError):
            calculate_gross_amount(-1)

    def test_zero_fee_schedule(self):
        calc = FeeCalculator(FeeSchedule(broadcaster_bps=0, relayer_bps=0, protocol_bps=0))
        assert calc.calculate_gross_amount(12_345) == 12_345

    def test_full_fee_schedule_has_no_gross(self):
        calc = FeeCalculator(FeeSchedule(broadcaster_bps=10_000, relayer_bps=0, protocol_bps=0))
        with pytest.raises(InvalidAmountError):
            calc.calculate_gross_amount(1)

    @given(st.integers(min_value=0, max_value=10**15))
    def test_gross_is_minimal(self, net):
        gross = calculate_gross_amount(net)

        assert calculate_fees(gross).net >= net
        for smaller in range(max(0, gross - 6), gross):
            assert calculate_fees(smaller).net < net


class TestFeeBreakdown:
    """Test the human readable breakdown."""

    def test_one_xlm(self):
        text = format_fee_breakdown(10_000_000)

        assert text.splitlines() == [
            "Amount: 1.0000000 XLM",
            "Network Fee (1%): 0.0100000 XLM",
            "  - Broadcaster: 0.0050000 XLM",
            "  - Relayer: 0.0010000 XLM",
            "  - Protocol: 0.0040000 XLM",
            "Recipient receives: 0.9900000 XLM",
        ]

    def test_custom_asset_and_rate(self):
        calc = FeeCalculator(FeeSchedule(broadcaster_bps=100, relayer_bps=25, protocol_bps=25))
        text = calc.format_fee_breakdown(20_000_000, asset="USDC")

        assert "Amount: 2.0000000 USDC" in text
        assert "Network Fee (1.5%): 0.0300000 USDC" in text
        assert text.endswith("Recipient receives: 1.9700000 USDC")
