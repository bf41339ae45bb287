"""
Wilder-smoothed Relative Strength Index.
NO DB. NO NETWORK.
"""

from typing import Sequence

from market_sentinel.domain.errors import IndicatorInputError
from market_sentinel.domain.models import Bar

RSI_PERIOD = 14
NEUTRAL_RSI = 50.0


def relative_strength_index(bars: Sequence[Bar], period: int = RSI_PERIOD) -> float:
    """
    Compute RSI over closing prices with Wilder smoothing.

    The first `period` deltas seed the average gain/loss; every later
    delta is folded in with avg = (avg * (period - 1) + value) / period.

    Args:
        bars: bars ordered oldest → newest
        period: RSI period (default 14)

    Returns:
        RSI in [0, 100]. NEUTRAL_RSI when fewer than period + 1 bars exist.

    Raises:
        IndicatorInputError: non-positive period
    """
    if period <= 0:
        raise IndicatorInputError("period must be positive")
    if len(bars) < period + 1:
        return NEUTRAL_RSI

    closes = [bar.close for bar in bars]

    avg_gain = 0.0
    avg_loss = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        if change > 0:
            avg_gain += change
        else:
            avg_loss -= change
    avg_gain /= period
    avg_loss /= period

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)
