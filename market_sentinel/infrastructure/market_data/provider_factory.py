"""
Market data fetcher factory (config-driven).
"""

from __future__ import annotations

import logging

from market_sentinel.config import Settings
from market_sentinel.infrastructure.market_data.mock_provider import MockFetcher
from market_sentinel.infrastructure.market_data.rest_provider import RestBarFetcher
from market_sentinel.infrastructure.market_data.types import MarketDataFetcher
from market_sentinel.infrastructure.market_data.yfinance_provider import YFinanceFetcher

logger = logging.getLogger(__name__)


def build_fetcher(settings: Settings) -> MarketDataFetcher:
    """
    Pick the bar source from configuration

    MOCK_MARKET_DATA wins, then a configured REST base URL, otherwise Yahoo.
    """
    if settings.MOCK_MARKET_DATA:
        fetcher: MarketDataFetcher = MockFetcher()
    elif settings.DATA_SOURCE_BASE_URL:
        fetcher = RestBarFetcher(
            base_url=settings.DATA_SOURCE_BASE_URL,
            api_key=settings.DATA_SOURCE_API_KEY,
            proxy=settings.HTTPS_PROXY,
        )
    else:
        fetcher = YFinanceFetcher(proxy=settings.HTTPS_PROXY)

    logger.info("Market data source: %s", fetcher.name)
    return fetcher
