"""Tests for paise conversion and the Indian-format helpers."""
from decimal import Decimal

import pytest

from utils.exceptions import ValidationError
from utils.formatting import amount_to_words, format_indian_currency
from utils.money import CR, DR, from_paise, from_signed, to_paise, to_signed


def test_to_paise_is_exact():
    assert to_paise("500.00") == 50000
    assert to_paise(Decimal("300.01")) == 30001
    assert to_paise(7) == 700


@pytest.mark.parametrize("amount", ["0.001", "12.345", "abc", "NaN", "1E+30", "100000000000000000.00"])
def test_to_paise_rejects_bad_amounts(amount):
    with pytest.raises(ValidationError):
        to_paise(amount)


def test_from_paise_keeps_two_places():
    assert from_paise(50000) == Decimal("500.00")
    assert str(from_paise(5)) == "0.05"
    assert from_paise(None) == Decimal("0.00")


def test_signed_round_trip_carries_side():
    assert to_signed(500, DR) == 500
    assert to_signed(500, CR) == -500
    assert from_signed(-500, DR) == (500, CR)
    assert from_signed(250, CR) == (250, DR)


def test_zero_balance_takes_natural_side():
    assert from_signed(0, CR) == (0, CR)
    assert from_signed(0, DR) == (0, DR)


def test_indian_currency_grouping():
    assert format_indian_currency(Decimal("1234567.5")) == "₹ 12,34,567.50"
    assert format_indian_currency(Decimal("999")) == "₹ 999.00"
    assert format_indian_currency(Decimal("-500")) == "(₹ 500.00)"


def test_amount_to_words():
    assert amount_to_words(Decimal("500.00")) == "Rupees Five Hundred Only"
    assert amount_to_words(Decimal("100500.50")) == "Rupees One Lakh Five Hundred and Fifty Paise Only"
    assert amount_to_words(Decimal("12000000")) == "Rupees One Crore Twenty Lakh Only"
    assert amount_to_words(Decimal("0.75")) == "Rupees Zero and Seventy Five Paise Only"
