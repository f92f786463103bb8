"""Tip fee arithmetic. All amounts are integers in minor currency units (cents)."""
import math
from typing import NamedTuple

from tunely.errors import OutOfRangeAmount

PLATFORM_FEE_PERCENTAGE = 0.01

# Stripe card pricing: 2.9% + 30c
STRIPE_FEE_PERCENTAGE = 0.029
STRIPE_FEE_FIXED = 30

MIN_TIP_AMOUNT = 1000  # $10
MAX_TIP_AMOUNT = 50000  # $500


class FeeBreakdown(NamedTuple):
    total: int
    platform_fee: int
    stripe_fee: int
    artist_receives: int


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; fees round .5 upwards.
    return int(math.floor(value + 0.5))


def platform_fee(amount: int) -> int:
    return round_half_up(amount * PLATFORM_FEE_PERCENTAGE)


def estimated_processor_fee(amount: int) -> int:
    """Estimate what Stripe keeps from the charge."""
    return round_half_up(amount * STRIPE_FEE_PERCENTAGE + STRIPE_FEE_FIXED)


def artist_net_amount(amount: int) -> int:
    return amount - platform_fee(amount) - estimated_processor_fee(amount)


def validate_amount(amount: int) -> None:
    if amount < MIN_TIP_AMOUNT:
        raise OutOfRangeAmount(f"Minimum tip amount is ${MIN_TIP_AMOUNT // 100}")
    if amount > MAX_TIP_AMOUNT:
        raise OutOfRangeAmount(f"Maximum tip amount is ${MAX_TIP_AMOUNT // 100}")


def fee_breakdown(amount: int) -> FeeBreakdown:
    return FeeBreakdown(
        total=amount,
        platform_fee=platform_fee(amount),
        stripe_fee=estimated_processor_fee(amount),
        artist_receives=artist_net_amount(amount),
    )
