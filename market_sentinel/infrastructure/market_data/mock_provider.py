"""
Mock Market Data Fetcher
Deterministic synthetic bars for development and tests
"""

from datetime import datetime, timedelta
from typing import List, Optional

from market_sentinel.domain.models import Bar


def generate_bars(base_price: float, count: int, step: timedelta = timedelta(days=1)) -> List[Bar]:
    """Gently rising series centred on base_price, oldest first"""
    now = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    bars = []
    for i in range(count):
        price = base_price * (1 + (i - count // 2) * 0.001)
        bars.append(Bar(
            timestamp=now - step * (count - i),
            open=price * 0.999,
            high=price * 1.005,
            low=price * 0.995,
            close=price,
            volume=1_000_000.0,
        ))
    return bars


class MockFetcher:
    """Fixed-price fetcher; explicit bar lists override the generated series"""

    name = "mock"

    def __init__(
        self,
        price: float = 5000.0,
        daily_bars: Optional[List[Bar]] = None,
        weekly_bars: Optional[List[Bar]] = None,
    ):
        self.price = price
        self.daily_bars = daily_bars
        self.weekly_bars = weekly_bars

    async def fetch_daily_bars(self, symbol: str, count: int) -> List[Bar]:
        if self.daily_bars is not None:
            return list(self.daily_bars)
        return generate_bars(self.price, count)

    async def fetch_weekly_bars(self, symbol: str, count: int) -> List[Bar]:
        if self.weekly_bars is not None:
            return list(self.weekly_bars)
        return generate_bars(self.price, count, step=timedelta(weeks=1))

    async def fetch_current_price(self, symbol: str) -> float:
        return self.price
