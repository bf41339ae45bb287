"""
REST Bar Fetcher
Generic bar/quote HTTP API (daily bars, weekly bars, quote)

Endpoints:
    GET {base}/api/v1/bars/daily?symbol=..&limit=..
    GET {base}/api/v1/bars/weekly?symbol=..&limit=..
    GET {base}/api/v1/quote?symbol=..

Bars are JSON lists of {timestamp (epoch s), open, high, low, close, volume}.
"""

import logging
import math
from datetime import datetime
from typing import Any, List, Optional

import httpx

from market_sentinel.domain.errors import DataUnavailableError
from market_sentinel.domain.models import Bar

logger = logging.getLogger(__name__)


def _price(raw: Any, field: str) -> float:
    """Parse a price; NaN, infinite, zero and negative values are rejected"""
    value = float(raw)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"unusable {field} {raw!r}")
    return value


def aggregate_daily_to_weekly(daily: List[Bar]) -> List[Bar]:
    """
    Collapse daily bars into ISO-week bars

    open = first open, high = max high, low = min low,
    close = last close, volume = summed. Input must be sorted ascending.
    """
    weekly: List[Bar] = []
    current: Optional[Bar] = None
    current_key = None

    for bar in daily:
        iso = bar.timestamp.isocalendar()
        key = (iso[0], iso[1])

        if current is None or key != current_key:
            if current is not None:
                weekly.append(current)
            current = bar
            current_key = key
            continue

        current = Bar(
            timestamp=current.timestamp,
            open=current.open,
            high=max(current.high, bar.high),
            low=min(current.low, bar.low),
            close=bar.close,
            volume=current.volume + bar.volume,
        )

    if current is not None:
        weekly.append(current)
    return weekly


class RestBarFetcher:
    """
    HTTP bar fetcher
    Optional bearer API key and HTTPS proxy
    """

    name = "rest"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        proxy: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.proxy = proxy
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return httpx.AsyncClient(timeout=self.timeout, proxy=self.proxy)

    async def _request_json(self, path: str, params: dict) -> Any:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        url = f"{self.base_url}{path}"
        try:
            async with self._client() as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise DataUnavailableError(f"Request to {path} failed: {exc}") from exc

        if response.status_code != 200:
            raise DataUnavailableError(
                f"Request to {path} failed: status {response.status_code}, body: {response.text}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise DataUnavailableError(f"Invalid JSON from {path}: {exc}") from exc

    async def _fetch_bars(self, path: str, symbol: str, limit: int) -> List[Bar]:
        payload = await self._request_json(path, {"symbol": symbol, "limit": limit})
        if not isinstance(payload, list):
            raise DataUnavailableError(f"Unexpected bars payload from {path}")

        try:
            bars = [
                Bar(
                    timestamp=datetime.fromtimestamp(int(item["timestamp"])),
                    open=_price(item["open"], "open"),
                    high=_price(item["high"], "high"),
                    low=_price(item["low"], "low"),
                    close=_price(item["close"], "close"),
                    volume=float(item.get("volume", 0.0)),
                )
                for item in payload
            ]
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
            raise DataUnavailableError(f"Malformed bar from {path}: {exc}") from exc

        bars.sort(key=lambda b: b.timestamp)
        return bars

    async def fetch_daily_bars(self, symbol: str, count: int) -> List[Bar]:
        return await self._fetch_bars("/api/v1/bars/daily", symbol, count)

    async def fetch_weekly_bars(self, symbol: str, count: int) -> List[Bar]:
        """Weekly endpoint, falling back to aggregated daily bars"""
        try:
            return await self._fetch_bars("/api/v1/bars/weekly", symbol, count)
        except DataUnavailableError as exc:
            logger.warning("Weekly bars unavailable (%s), aggregating daily bars", exc)

        try:
            daily = await self.fetch_daily_bars(symbol, count * 7)
        except DataUnavailableError as exc:
            raise DataUnavailableError(
                f"Weekly fetch failed and daily fallback also failed: {exc}"
            ) from exc
        return aggregate_daily_to_weekly(daily)

    async def fetch_current_price(self, symbol: str) -> float:
        payload = await self._request_json("/api/v1/quote", {"symbol": symbol})
        try:
            return _price(payload["price"], "quote price")
        except (KeyError, TypeError, ValueError) as exc:
            raise DataUnavailableError(f"Malformed quote payload: {exc}") from exc
