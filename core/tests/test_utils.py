from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError

from core.utils import ZERO, money, percentage_0_100, to_cents, validate_non_negative_amount


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, ZERO),
        (10, Decimal("10.00")),
        ("4.005", Decimal("4.01")),
        (0.1 + 0.2, Decimal("0.30")),
        (Decimal("2.345"), Decimal("2.35")),
    ],
)
def test_money(value, expected):
    assert money(value) == expected


def test_to_cents():
    assert to_cents(Decimal("47.00")) == 4700
    assert to_cents("0.015") == 2
    assert to_cents(0) == 0


def test_percentage_bounds():
    percentage_0_100(Decimal("0"))
    percentage_0_100(100)
    with pytest.raises(ValidationError):
        percentage_0_100(Decimal("100.01"))
    with pytest.raises(ValidationError):
        percentage_0_100(-1)


def test_non_negative_amount():
    validate_non_negative_amount(None)
    validate_non_negative_amount(Decimal("0.00"))
    with pytest.raises(ValidationError):
        validate_non_negative_amount(Decimal("-0.01"))
