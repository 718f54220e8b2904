"""Fee calculation."""

from meshpay_rewards.calculators.fees import (
    I128_MAX,
    I128_MIN,
    FeeCalculator,
    FeeSplit,
    calculate_fees,
    calculate_gross_amount,
    format_fee_breakdown,
)
from meshpay_rewards.calculators.units import STROOPS_PER_UNIT, from_stroops, to_stroops

__all__ = [
    "FeeCalculator",
    "FeeSplit",
    "I128_MAX",
    "I128_MIN",
    "calculate_fees",
    "calculate_gross_amount",
    "format_fee_breakdown",
    "STROOPS_PER_UNIT",
    "from_stroops",
    "to_stroops",
]
