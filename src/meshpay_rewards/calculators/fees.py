"""Fee split calculator.

Splits a gross amount (integer minimal units) into four parts:

    broadcaster = gross * broadcaster_bps / 10000   (truncated)
    relayer     = gross * relayer_bps / 10000       (truncated)
    protocol    = gross * protocol_bps / 10000      (truncated)
    net         = gross - broadcaster - relayer - protocol

Each fee is truncated on its own. Truncating once on the combined rate can
differ by up to 2 units, so the combined shortcut must not be used. Net is
always the remainder, which makes net + fees == gross exact.

Amounts live in the signed 128-bit domain of the settlement asset. Values or
intermediate products outside that domain raise ArithmeticOverflowError.
"""

from __future__ import annotations

from typing import NamedTuple

from meshpay_rewards.calculators.units import DECIMALS, from_stroops
from meshpay_rewards.config import BPS_DENOMINATOR, DEFAULT_FEE_SCHEDULE, FeeSchedule
from meshpay_rewards.errors import ArithmeticOverflowError, InvalidAmountError

I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


class FeeSplit(NamedTuple):
    """Result of a fee calculation."""

    net: int
    broadcaster_fee: int
    relayer_fee: int
    protocol_fee: int

    @property
    def total_fee(self) -> int:
        return self.broadcaster_fee + self.relayer_fee + self.protocol_fee

    @property
    def gross(self) -> int:
        return self.net + self.total_fee


def _check_i128(value: int, what: str) -> int:
    if value < I128_MIN or value > I128_MAX:
        raise ArithmeticOverflowError(f"{what} {value} is outside the 128-bit amount range")
    return value


def _check_amount(amount: object, name: str) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"{name} must be an int, got {type(amount).__name__}")
    _check_i128(amount, name)
    if amount < 0:
        raise InvalidAmountError(f"{name} must not be negative, got {amount}")
    return amount


class FeeCalculator:
    """Pure fee calculator for a fixed schedule.

    Usage:
        calc = FeeCalculator()
        split = calc.calculate_fees(10_000)
        # FeeSplit(net=9900, broadcaster_fee=50, relayer_fee=10, protocol_fee=40)
    """

    def __init__(self, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE):
        self.schedule = schedule

    def _fee(self, gross_amount: int, rate_bps: int) -> int:
        product = _check_i128(gross_amount * rate_bps, "fee product")
        return product // BPS_DENOMINATOR

    def calculate_fees(self, gross_amount: int) -> FeeSplit:
        """Split gross_amount into (net, broadcaster, relayer, protocol).

        Raises:
            TypeError: if gross_amount is not an int.
            InvalidAmountError: if gross_amount is negative.
            ArithmeticOverflowError: if gross_amount or a fee product leaves
                the 128-bit range.
        """
        gross = _check_amount(gross_amount, "gross_amount")

        broadcaster_fee = self._fee(gross, self.schedule.broadcaster_bps)
        relayer_fee = self._fee(gross, self.schedule.relayer_bps)
        protocol_fee = self._fee(gross, self.schedule.protocol_bps)
        net = gross - broadcaster_fee - relayer_fee - protocol_fee

        return FeeSplit(
            net=net,
            broadcaster_fee=broadcaster_fee,
            relayer_fee=relayer_fee,
            protocol_fee=protocol_fee,
        )

    def calculate_gross_amount(self, net_amount: int) -> int:
        """Smallest gross amount whose net is at least net_amount.

        Answers "how much must the sender be charged so the recipient gets
        net_amount". Net is not monotonic in gross (several fees can step up
        at once), so the candidates between the two analytic bounds are
        scanned in ascending order.
        """
        target = _check_amount(net_amount, "net_amount")
        total_bps = self.schedule.total_bps
        if total_bps == 0 or target == 0:
            return target

        keep = BPS_DENOMINATOR - total_bps
        if keep == 0:
            raise InvalidAmountError("no gross amount yields a positive net at a 100% fee")

        # Each truncated fee loses less than one unit, so
        #   gross * keep / D <= net(gross) < gross * keep / D + 3
        lower = max(target, -(-(target - 3) * BPS_DENOMINATOR // keep))
        upper = -(-target * BPS_DENOMINATOR // keep)

        for gross in range(lower, upper + 1):
            if self.calculate_fees(gross).net >= target:
                return gross
        return upper

    def format_fee_breakdown(self, gross_amount: int, asset: str = "XLM") -> str:
        """Human readable breakdown of a split; amounts are in stroops."""
        split = self.calculate_fees(gross_amount)
        percent = _bps_to_percent(self.schedule.total_bps)

        def fmt(value: int) -> str:
            return f"{from_stroops(value):.{DECIMALS}f} {asset}"

        return "\n".join(
            [
                f"Amount: {fmt(gross_amount)}",
                f"Network Fee ({percent}%): {fmt(split.total_fee)}",
                f"  - Broadcaster: {fmt(split.broadcaster_fee)}",
                f"  - Relayer: {fmt(split.relayer_fee)}",
                f"  - Protocol: {fmt(split.protocol_fee)}",
                f"Recipient receives: {fmt(split.net)}",
            ]
        )


def _bps_to_percent(bps: int) -> str:
    whole, rest = divmod(bps, 100)
    if not rest:
        return str(whole)
    return f"{whole}.{rest:02d}".rstrip("0")


_default_calculator = FeeCalculator()


def calculate_fees(gross_amount: int) -> FeeSplit:
    """Split gross_amount with the default 0.5% / 0.1% / 0.4% schedule."""
    return _default_calculator.calculate_fees(gross_amount)


def calculate_gross_amount(net_amount: int) -> int:
    """Reverse of calculate_fees() for the default schedule."""
    return _default_calculator.calculate_gross_amount(net_amount)


def format_fee_breakdown(gross_amount: int, asset: str = "XLM") -> str:
    """Fee breakdown text for the default schedule."""
    return _default_calculator.format_fee_breakdown(gross_amount, asset)
