"""
Platform fee / creator payout split.

All amounts are integer cents. The fee is rounded half-up and the payout
absorbs the remainder, so fee + payout always equals the gross amount.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Tuple


def compute_split(gross_amount: int, commission_rate: float) -> Tuple[int, int]:
    """Return (platform_fee, creator_payout) for a gross amount in cents."""
    if gross_amount < 0:
        raise ValueError(f"gross_amount must be >= 0, got {gross_amount}")
    if not 0 <= commission_rate <= 100:
        raise ValueError(f"commission_rate must be within [0, 100], got {commission_rate}")

    # str() keeps 12.5 as Decimal("12.5") rather than its binary float expansion
    fee = (Decimal(gross_amount) * Decimal(str(commission_rate)) / Decimal(100)).quantize(
        Decimal(1), rounding=ROUND_HALF_UP
    )
    platform_fee = int(fee)
    return platform_fee, gross_amount - platform_fee
