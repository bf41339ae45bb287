"""
Moving average indicators.
NO DB. NO NETWORK.
"""

from typing import Sequence

import pandas as pd

from market_sentinel.domain.errors import IndicatorInputError
from market_sentinel.domain.models import Bar

MA200_PERIOD = 200
MA20W_PERIOD = 20
MA50W_PERIOD = 50


def extract_closes(bars: Sequence[Bar]) -> list[float]:
    return [bar.close for bar in bars]


def simple_moving_average(prices: Sequence[float], period: int) -> float:
    """
    Arithmetic mean of the last `period` prices.

    Args:
        prices: closing prices (oldest → newest)
        period: lookback window

    Raises:
        IndicatorInputError: non-positive period or fewer prices than period
    """
    if period <= 0:
        raise IndicatorInputError("period must be positive")
    if len(prices) < period:
        raise IndicatorInputError(
            f"Not enough data for SMA calculation: need {period}, got {len(prices)}"
        )

    return float(pd.Series(prices, dtype="float64").tail(period).mean())


def ma200(daily_bars: Sequence[Bar]) -> float:
    return simple_moving_average(extract_closes(daily_bars), MA200_PERIOD)


def ma20w(weekly_bars: Sequence[Bar]) -> float:
    return simple_moving_average(extract_closes(weekly_bars), MA20W_PERIOD)


def ma50w(weekly_bars: Sequence[Bar]) -> float:
    return simple_moving_average(extract_closes(weekly_bars), MA50W_PERIOD)
