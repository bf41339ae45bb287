"""
YFinance Market Data Fetcher
Async-safe Yahoo Finance integration for index bars and quotes
"""

import asyncio
import logging
import math
import os
import random
from typing import Dict, List, Optional

import yfinance as yf

from market_sentinel.domain.errors import DataUnavailableError
from market_sentinel.domain.models import Bar

logger = logging.getLogger(__name__)


def daily_period(count: int) -> str:
    """Yahoo history period large enough for `count` daily bars"""
    if count <= 30:
        return "1mo"
    if count <= 90:
        return "3mo"
    if count <= 180:
        return "6mo"
    if count <= 365:
        return "1y"
    return "2y"


def weekly_period(count: int) -> str:
    """Yahoo history period large enough for `count` weekly bars"""
    if count <= 26:
        return "6mo"
    if count <= 52:
        return "1y"
    return "2y"


class YFinanceFetcher:
    """
    Yahoo Finance bar fetcher
    Async-safe via thread offloading
    """

    name = "yahoo"

    def __init__(self, retries: int = 2, proxy: Optional[str] = None):
        self.symbol_mapping: Dict[str, str] = {
            "SPX500": "^GSPC",
            "SPX": "^GSPC",
            "SP500": "^GSPC",
        }
        self.retries = retries
        self.proxy = proxy
        self._apply_symbol_overrides()

    def _apply_symbol_overrides(self) -> None:
        """
        Apply Yahoo symbol mapping overrides from env.

        Format: YF_SYMBOL_OVERRIDES="NDX100=^NDX,DJI=^DJI"
        """
        raw = os.getenv("YF_SYMBOL_OVERRIDES", "").strip()
        if not raw:
            return
        for pair in raw.split(","):
            key, sep, value = pair.partition("=")
            key, value = key.strip().upper(), value.strip()
            if sep and key and value:
                self.symbol_mapping[key] = value

    def yahoo_symbol(self, symbol: str) -> str:
        return self.symbol_mapping.get(symbol.upper(), symbol)

    # ------------------------------------------------------------------
    # INTERNAL HELPERS
    # ------------------------------------------------------------------

    def _ticker(self, symbol: str) -> yf.Ticker:
        if self.proxy:
            yf.set_config(proxy=self.proxy)
        return yf.Ticker(self.yahoo_symbol(symbol))

    async def _history(self, ticker: yf.Ticker, **kwargs):
        """
        Async-safe wrapper around yfinance history()
        """
        return await asyncio.to_thread(ticker.history, **kwargs)

    async def _history_with_retry(self, ticker: yf.Ticker, **kwargs):
        """
        Retry wrapper around history() to handle transient failures.
        """
        last_exc: Optional[Exception] = None
        for attempt in range(self.retries + 1):
            try:
                return await self._history(ticker, **kwargs)
            except Exception as exc:
                last_exc = exc
                logger.warning(
                    "Yahoo history failed (attempt %d/%d): %s",
                    attempt + 1, self.retries + 1, exc,
                )
                if attempt < self.retries:
                    await asyncio.sleep(0.4 * (2 ** attempt) + random.random() * 0.2)
        raise DataUnavailableError(f"Yahoo history request failed: {last_exc}") from last_exc

    @staticmethod
    def _frame_to_bars(frame) -> List[Bar]:
        """Convert a yfinance history frame into bars, skipping null or zero closes"""
        bars: List[Bar] = []
        if frame is None or frame.empty:
            return bars

        for ts, row in frame.iterrows():
            close = row.get("Close")
            if close is None or math.isnan(close) or close == 0:
                continue
            timestamp = ts.to_pydatetime() if hasattr(ts, "to_pydatetime") else ts
            bars.append(Bar(
                timestamp=timestamp,
                open=float(row.get("Open", close)),
                high=float(row.get("High", close)),
                low=float(row.get("Low", close)),
                close=float(close),
                volume=float(row.get("Volume", 0.0) or 0.0),
            ))

        bars.sort(key=lambda b: b.timestamp)
        return bars

    async def _fetch_bars(self, symbol: str, count: int, period: str, interval: str) -> List[Bar]:
        ticker = self._ticker(symbol)
        frame = await self._history_with_retry(
            ticker,
            period=period,
            interval=interval,
            auto_adjust=False,
        )
        bars = self._frame_to_bars(frame)
        if not bars:
            raise DataUnavailableError(f"No {interval} bars returned for {symbol}")
        return bars[-count:]

    # ------------------------------------------------------------------
    # FETCHER API
    # ------------------------------------------------------------------

    async def fetch_daily_bars(self, symbol: str, count: int) -> List[Bar]:
        return await self._fetch_bars(symbol, count, daily_period(count), "1d")

    async def fetch_weekly_bars(self, symbol: str, count: int) -> List[Bar]:
        return await self._fetch_bars(symbol, count, weekly_period(count), "1wk")

    async def fetch_current_price(self, symbol: str) -> float:
        """
        Latest available close (intraday data is often missing for indices,
        so read the last five daily bars)
        """
        bars = await self._fetch_bars(symbol, 1, "5d", "1d")
        price = bars[-1].close
        logger.debug("Yahoo price %s=%.2f at %s", symbol, price, bars[-1].timestamp)
        return price
