"""
Core utilities: money helpers and shared validators.
"""
from core.utils.money import ZERO, money, to_cents
from core.utils.validators import percentage_0_100, validate_non_negative_amount

__all__ = [
    "ZERO",
    "money",
    "to_cents",
    "percentage_0_100",
    "validate_non_negative_amount",
]
