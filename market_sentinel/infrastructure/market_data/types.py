"""
Market data fetcher protocol for type hints.
"""

from __future__ import annotations

from typing import List, Protocol

from market_sentinel.domain.models import Bar


class MarketDataFetcher(Protocol):
    """
    Source of OHLCV bars and the latest price.

    Bars come back sorted ascending by timestamp. Every method raises
    DataUnavailableError on network or parse failure.
    """

    name: str

    async def fetch_daily_bars(self, symbol: str, count: int) -> List[Bar]:
        ...

    async def fetch_weekly_bars(self, symbol: str, count: int) -> List[Bar]:
        ...

    async def fetch_current_price(self, symbol: str) -> float:
        ...
