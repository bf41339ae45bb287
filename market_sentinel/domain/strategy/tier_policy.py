"""
TIER POLICY
Score to investment tier mapping

Static ordered table evaluated top-down: the first threshold the
composite score meets or exceeds wins, anything below the last
threshold falls to the floor tier.

multiplier   → applied to weekly base N, drawn from the regular pool
reserve_use  → applied to weekly base N, drawn from the reserve pool
"""

import math
from decimal import Decimal
from typing import Tuple

from market_sentinel.domain.models import InvestmentTier

EXTREME_HEAVY = InvestmentTier("extreme-heavy", Decimal("1.0"), Decimal("1.5"))
HEAVY = InvestmentTier("heavy", Decimal("1.0"), Decimal("1.0"))
ADD = InvestmentTier("add", Decimal("1.0"), Decimal("0.5"))
NORMAL = InvestmentTier("normal", Decimal("1.0"), Decimal("0"))
REDUCED = InvestmentTier("reduced", Decimal("0.5"), Decimal("0"))
LIGHT_WATCH = InvestmentTier("light/watch", Decimal("0.25"), Decimal("0"))
MINIMUM = InvestmentTier("minimum", Decimal("0.15"), Decimal("0"))

TIER_TABLE: Tuple[Tuple[float, InvestmentTier], ...] = (
    (1.5, EXTREME_HEAVY),
    (1.2, HEAVY),
    (0.8, ADD),
    (0.0, NORMAL),
    (-0.8, REDUCED),
    (-1.5, LIGHT_WATCH),
)

FLOOR_TIER = MINIMUM


def map_tier(total_score: float) -> InvestmentTier:
    """
    Map a composite score to its investment tier.

    Raises:
        ValueError: score is NaN (an unscored signal never silently
            lands in the floor tier)
    """
    if math.isnan(total_score):
        raise ValueError("Cannot map NaN score to an investment tier")

    for threshold, tier in TIER_TABLE:
        if total_score >= threshold:
            return tier
    return FLOOR_TIER


def validate_tier_table() -> None:
    """
    Validate the tier table.

    Rules enforced:
    - Thresholds strictly decreasing
    - Multipliers and reserve fractions non-negative
    """
    previous = None
    for threshold, tier in TIER_TABLE:
        if previous is not None and threshold >= previous:
            raise ValueError("Tier thresholds must be strictly decreasing")
        if tier.multiplier < 0 or tier.reserve_use < 0:
            raise ValueError(f"Tier {tier.label} has a negative multiplier")
        previous = threshold

    if FLOOR_TIER.multiplier < 0 or FLOOR_TIER.reserve_use < 0:
        raise ValueError("Floor tier has a negative multiplier")


def get_tier_table() -> Tuple[Tuple[float, InvestmentTier], ...]:
    """Tier table plus the floor tier, for display."""
    return TIER_TABLE + ((-math.inf, FLOOR_TIER),)
