"""
FACTOR LADDERS
Scoring tables for the five market factors

Static step functions used by the scoring engine. Each ladder is an
ordered tuple of (inclusive upper bound, raw score) pairs evaluated
top-down; the first bound the metric does not exceed wins, and values
above the last bound take the ladder's ceiling score.

Tables are data so they can be tuned and tested without touching
branching code.
"""

from decimal import Decimal
from typing import Dict, Tuple

ScoreLadder = Tuple[Tuple[float, float], ...]

# -------------------------------------------------------------------
# Factor names and weights (weights sum to 1.0)
# -------------------------------------------------------------------

MA200_DEVIATION = "MA200 deviation"
WEEKLY_RSI = "Weekly RSI"
DAILY_RSI = "Daily RSI"
POSITION_52W = "52-week position"
TREND_TRACKER = "Trend tracker"

FACTOR_WEIGHTS: Dict[str, float] = {
    MA200_DEVIATION: 0.35,
    WEEKLY_RSI: 0.25,
    DAILY_RSI: 0.15,
    POSITION_52W: 0.10,
    TREND_TRACKER: 0.15,
}

# Evaluation / reporting order
FACTOR_ORDER: Tuple[str, ...] = (
    MA200_DEVIATION,
    WEEKLY_RSI,
    DAILY_RSI,
    POSITION_52W,
    TREND_TRACKER,
)

# -------------------------------------------------------------------
# Ladders
# -------------------------------------------------------------------

# Metric: (price - MA200) / MA200 * 100
MA200_DEVIATION_LADDER: ScoreLadder = (
    (-20.0, 2.0),
    (-10.0, 1.5),
    (-5.0, 1.0),
    (0.0, 0.5),
    (5.0, 0.0),
    (10.0, -0.5),
    (15.0, -1.0),
    (20.0, -1.5),
)
MA200_DEVIATION_CEILING = -2.0

# Shared by weekly and daily RSI(14)
RSI_LADDER: ScoreLadder = (
    (25.0, 2.0),
    (30.0, 1.5),
    (40.0, 1.0),
    (45.0, 0.5),
    (55.0, 0.0),
    (60.0, -0.5),
    (70.0, -1.0),
    (80.0, -1.5),
)
RSI_CEILING = -2.0

# Metric: 52-week position * 100
POSITION_52W_LADDER: ScoreLadder = (
    (10.0, 2.0),
    (20.0, 1.5),
    (30.0, 1.0),
    (40.0, 0.5),
    (60.0, 0.0),
    (70.0, -0.5),
    (80.0, -1.0),
    (95.0, -1.5),
)
# Above the last bound the score depends on the other factors' mean:
# below the confirmation threshold → extreme score, otherwise capped.
POSITION_52W_EXTREME = -2.0
POSITION_52W_CAPPED = -1.0
POSITION_52W_CONFIRMATION = -1.0

# Trend tracker
TREND_NEAR_EXTREME_PCT = 0.01
TREND_BULLISH_AT_HIGH = 1.5
TREND_BULLISH = 1.0
TREND_BEARISH_AT_LOW = -1.0
TREND_BEARISH = -0.5
TREND_NEUTRAL = 0.0

# RSI level above which a take-profit warning is attached
TAKE_PROFIT_RSI = 85.0

# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


def score_from_ladder(value: float, ladder: ScoreLadder, ceiling: float) -> float:
    """Return the score of the first bound `value` does not exceed."""
    for upper_bound, score in ladder:
        if value <= upper_bound:
            return score
    return ceiling


def validate_ladder(ladder: ScoreLadder, ceiling: float) -> None:
    """
    Validate a ladder.

    Rules enforced:
    - Ladder must not be empty
    - Bounds strictly increasing
    - Scores non-increasing, ending at or above the ceiling
    """
    if not ladder:
        raise ValueError("Ladder cannot be empty")

    previous_bound = None
    previous_score = None
    for bound, score in ladder:
        if previous_bound is not None and bound <= previous_bound:
            raise ValueError("Ladder bounds must be strictly increasing")
        if previous_score is not None and score > previous_score:
            raise ValueError("Ladder scores must be non-increasing")
        previous_bound, previous_score = bound, score

    if ceiling > previous_score:
        raise ValueError("Ceiling score must not exceed the last ladder score")


def validate_factor_weights() -> None:
    """Weights must cover every factor and sum to exactly 1.0."""
    if set(FACTOR_WEIGHTS) != set(FACTOR_ORDER):
        raise ValueError("Factor weights must cover every factor")

    total = sum(Decimal(str(weight)) for weight in FACTOR_WEIGHTS.values())
    if total != Decimal("1"):
        raise ValueError(f"Factor weights must sum to 1.0, got {total}")


def validate_ladders() -> None:
    """Check every ladder and the weights; run once at startup."""
    validate_ladder(MA200_DEVIATION_LADDER, MA200_DEVIATION_CEILING)
    validate_ladder(RSI_LADDER, RSI_CEILING)
    validate_ladder(POSITION_52W_LADDER, POSITION_52W_EXTREME)
    validate_factor_weights()
