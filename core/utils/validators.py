"""
Core Utils - Validators.
"""
from decimal import Decimal

from django.core.exceptions import ValidationError


def percentage_0_100(value: Decimal | int):
    """Value must be between 0 and 100."""
    if value < 0 or value > 100:
        raise ValidationError("Must be between 0 and 100.")


def validate_non_negative_amount(value: Decimal | int | None):
    if value is None:
        return
    if value < 0:
        raise ValidationError("Amount cannot be negative.")
