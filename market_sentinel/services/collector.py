"""
INDICATOR COLLECTOR

Fetch bars and the latest price, then compute one MarketIndicators set.

A failed fetch aborts the cycle (DataUnavailableError propagates).
A failed indicator degrades to a neutral fallback and is logged.
"""

import asyncio
import logging
from typing import Callable, Sequence, Tuple, TypeVar

from market_sentinel.domain.errors import IndicatorInputError
from market_sentinel.domain.indicators.moving_average import ma200, ma20w, ma50w
from market_sentinel.domain.indicators.ranges import position_in_range, range_30_day, range_52_week
from market_sentinel.domain.indicators.rsi import NEUTRAL_RSI, relative_strength_index
from market_sentinel.domain.models import Bar, MarketIndicators
from market_sentinel.infrastructure.market_data.types import MarketDataFetcher

logger = logging.getLogger(__name__)

DAILY_BARS = 300
WEEKLY_BARS = 60

T = TypeVar("T")


def _with_fallback(label: str, compute: Callable[[], T], fallback: T) -> T:
    try:
        return compute()
    except IndicatorInputError as exc:
        logger.warning("%s calculation failed: %s, using %s", label, exc, fallback)
        return fallback


def compute_indicators(
    daily: Sequence[Bar],
    weekly: Sequence[Bar],
    price: float,
) -> MarketIndicators:
    """Indicator set from raw bars; never raises for short or empty series"""
    price_range: Tuple[float, float] = (price, price)

    high_52w, low_52w = _with_fallback("52-week range", lambda: range_52_week(daily), price_range)
    high_30d, low_30d = _with_fallback("30-day range", lambda: range_30_day(daily), price_range)

    return MarketIndicators(
        current_price=price,
        ma200=_with_fallback("MA200", lambda: ma200(daily), price),
        ma20w=_with_fallback("MA20w", lambda: ma20w(weekly), price),
        ma50w=_with_fallback("MA50w", lambda: ma50w(weekly), price),
        weekly_rsi=_with_fallback("Weekly RSI", lambda: relative_strength_index(weekly), NEUTRAL_RSI),
        daily_rsi=_with_fallback("Daily RSI", lambda: relative_strength_index(daily), NEUTRAL_RSI),
        high_52w=high_52w,
        low_52w=low_52w,
        high_30d=high_30d,
        low_30d=low_30d,
        position_52w=_with_fallback(
            "52-week position", lambda: position_in_range(price, high_52w, low_52w), 0.5
        ),
    )


class IndicatorCollector:
    """Bar fetching plus indicator computation for one symbol"""

    def __init__(self, fetcher: MarketDataFetcher, symbol: str):
        self.fetcher = fetcher
        self.symbol = symbol

    async def collect(self) -> MarketIndicators:
        """
        Raises:
            DataUnavailableError: any of the three fetches failed
        """
        daily, weekly, price = await asyncio.gather(
            self.fetcher.fetch_daily_bars(self.symbol, DAILY_BARS),
            self.fetcher.fetch_weekly_bars(self.symbol, WEEKLY_BARS),
            self.fetcher.fetch_current_price(self.symbol),
        )

        indicators = compute_indicators(daily, weekly, price)
        logger.info(
            "Collected %s via %s: price=%.2f MA200=%.2f wRSI=%.1f dRSI=%.1f pos52w=%.2f",
            self.symbol, self.fetcher.name, indicators.current_price, indicators.ma200,
            indicators.weekly_rsi, indicators.daily_rsi, indicators.position_52w,
        )
        return indicators
