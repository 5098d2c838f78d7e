"""
Scorecard — Grading Multiplier

multiplier = PSA 10 price / raw price, rounded half-up to 2 decimal places.
Undefined (None) unless both prices are present and positive.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

_TWO_DP = Decimal("0.01")
_ZERO = Decimal("0")


def _to_decimal(value: Decimal | float | int | str | None) -> Decimal | None:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def calculate_multiplier(
    psa10_price: Decimal | float | int | str | None,
    raw_price: Decimal | float | int | str | None,
) -> Decimal | None:
    """
    Examples:
        >>> calculate_multiplier(Decimal("250"), Decimal("40"))
        Decimal('6.25')
        >>> calculate_multiplier(Decimal("100"), Decimal("0")) is None
        True
    """
    psa10 = _to_decimal(psa10_price)
    raw = _to_decimal(raw_price)
    if psa10 is None or raw is None or psa10 <= _ZERO or raw <= _ZERO:
        return None
    return (psa10 / raw).quantize(_TWO_DP, rounding=ROUND_HALF_UP)
