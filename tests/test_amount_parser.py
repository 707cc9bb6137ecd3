"""Tests for amount parsing."""

from decimal import Decimal

import pytest

from dreledger.utils.amount_parser import coerce_amount, parse_amount


@pytest.mark.parametrize(
    "text, expected",
    [
        ("123.45", Decimal("123.45")),
        ("-123.45", Decimal("-123.45")),
        ("R$ 1.234,56", Decimal("1234.56")),
        ("1,234.56", Decimal("1234.56")),
        ("(50.00)", Decimal("-50.00")),
        ("$ 10", Decimal("10")),
        ("0,5", Decimal("0.5")),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize("text", ["", "  ", "abc", "NaN", "Infinity"])
def test_parse_amount_invalid(text):
    with pytest.raises(ValueError):
        parse_amount(text)


def test_coerce_amount_accepts_numbers():
    assert coerce_amount(10) == Decimal("10")
    assert coerce_amount(0.1) == Decimal("0.1")
    assert coerce_amount(Decimal("2.50")) == Decimal("2.50")
    assert coerce_amount("1.000,00") == Decimal("1000.00")


@pytest.mark.parametrize("value", [None, True, [], float("nan"), Decimal("Infinity")])
def test_coerce_amount_rejects_non_amounts(value):
    with pytest.raises(ValueError):
        coerce_amount(value)
