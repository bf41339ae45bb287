"""
High/low range indicators.
NO DB. NO NETWORK.
"""

from typing import Sequence, Tuple

from market_sentinel.domain.errors import IndicatorInputError
from market_sentinel.domain.models import Bar

# Trading days
WINDOW_52_WEEK = 252
WINDOW_30_DAY = 22


def price_range(bars: Sequence[Bar], window: int) -> Tuple[float, float]:
    """
    Highest high and lowest low over the last `window` bars.

    Uses the whole series when it is shorter than the window.

    Returns:
        (high, low)
    """
    if not bars:
        raise IndicatorInputError("no bars provided")
    if window <= 0:
        raise IndicatorInputError("window must be positive")

    recent = bars[-window:]
    high = max(bar.high for bar in recent)
    low = min(bar.low for bar in recent)
    return high, low


def range_52_week(daily_bars: Sequence[Bar]) -> Tuple[float, float]:
    return price_range(daily_bars, WINDOW_52_WEEK)


def range_30_day(daily_bars: Sequence[Bar]) -> Tuple[float, float]:
    return price_range(daily_bars, WINDOW_30_DAY)


def position_in_range(price: float, high: float, low: float) -> float:
    """
    Where price sits inside [low, high], clamped to [0, 1].

    A flat range (high == low) has no meaningful position and yields 0.5.
    """
    if high == low:
        return 0.5
    if high < low:
        raise IndicatorInputError("high must be >= low")

    position = (price - low) / (high - low)
    return min(max(position, 0.0), 1.0)
