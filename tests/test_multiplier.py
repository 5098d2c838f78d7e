"""
Tests for the grading multiplier (src/engine/multiplier.py).
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from src.engine.multiplier import calculate_multiplier


def test_zero_raw_price_is_undefined() -> None:
    assert calculate_multiplier(Decimal("500"), Decimal("0")) is None


def test_simple_ratio() -> None:
    result = calculate_multiplier(Decimal("500"), Decimal("50"))
    assert result == Decimal("10.00")
    assert str(result) == "10.00"


@pytest.mark.parametrize("psa10, raw, expected", [
    ("250", "40", "6.25"),
    ("100", "3", "33.33"),
    ("2", "3", "0.67"),
    ("1", "8", "0.13"),      # half-up, not banker's rounding
    (500, 50, "10.00"),
    (12.5, 5, "2.50"),
])
def test_rounding(psa10, raw, expected: str) -> None:
    assert calculate_multiplier(psa10, raw) == Decimal(expected)


@pytest.mark.parametrize("psa10, raw", [
    (None, Decimal("50")),
    (Decimal("500"), None),
    (Decimal("-500"), Decimal("50")),
    (Decimal("500"), Decimal("-1")),
    (Decimal("0"), Decimal("50")),
    ("abc", "50"),
    ("NaN", "50"),
    (Decimal("Infinity"), Decimal("50")),
])
def test_undefined_inputs(psa10, raw) -> None:
    assert calculate_multiplier(psa10, raw) is None
