"""Conversion between asset units and integer minimal units (stroops)."""

from __future__ import annotations

from decimal import Decimal

from meshpay_rewards.errors import InvalidAmountError

DECIMALS = 7
STROOPS_PER_UNIT = 10**DECIMALS


def to_stroops(amount: Decimal | str | int) -> int:
    """Convert an asset amount (e.g. "12.5" XLM) to stroops.

    Raises:
        TypeError: for floats and other non-decimal inputs.
        InvalidAmountError: for non-finite values or more than 7 decimal places.
    """
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, str, int)):
        raise TypeError(f"amount must be Decimal, str or int, got {type(amount).__name__}")

    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite():
        raise InvalidAmountError(f"amount must be finite, got {amount}")

    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(str(d) for d in digits)) if digits else 0
    shift = exponent + DECIMALS  # type: ignore[operator]

    if shift >= 0:
        stroops = coefficient * 10**shift
    else:
        divisor = 10 ** (-shift)
        if coefficient % divisor:
            raise InvalidAmountError(
                f"amount {amount} has more than {DECIMALS} decimal places"
            )
        stroops = coefficient // divisor

    return -stroops if sign else stroops


def from_stroops(stroops: int) -> Decimal:
    """Convert stroops to an exact Decimal with 7 decimal places."""
    if isinstance(stroops, bool) or not isinstance(stroops, int):
        raise TypeError(f"stroops must be an int, got {type(stroops).__name__}")

    whole, fraction = divmod(abs(stroops), STROOPS_PER_UNIT)
    sign = "-" if stroops < 0 else ""
    return Decimal(f"{sign}{whole}.{fraction:0{DECIMALS}d}")
