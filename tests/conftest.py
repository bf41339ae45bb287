from datetime import datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator, List

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from market_sentinel.api.routes import fund, health, signal
from market_sentinel.domain.errors import DataUnavailableError, NotificationError, PersistenceError
from market_sentinel.domain.models import Bar, FundState, MarketIndicators
from market_sentinel.domain.services.fund_manager import FundManager
from market_sentinel.services.orchestrator import SentinelService


# -------------------------------------------------------------------
# Builders
# -------------------------------------------------------------------

def make_bars(closes, start=datetime(2024, 1, 1), step=timedelta(days=1)) -> List[Bar]:
    return [
        Bar(
            timestamp=start + step * i,
            open=close,
            high=close * 1.01,
            low=close * 0.99,
            close=close,
            volume=1000.0,
        )
        for i, close in enumerate(closes)
    ]


def make_indicators(**overrides) -> MarketIndicators:
    """Neutral baseline: total score 0.05, tier normal"""
    values = dict(
        current_price=5800.0,
        ma200=5700.0,
        ma20w=5750.0,
        ma50w=5600.0,
        weekly_rsi=50.0,
        daily_rsi=50.0,
        high_52w=6000.0,
        low_52w=5000.0,
        high_30d=5950.0,
        low_30d=5500.0,
        position_52w=0.8,
    )
    values.update(overrides)
    return MarketIndicators(**values)


@pytest.fixture()
def bars_factory():
    return make_bars


@pytest.fixture()
def indicators_factory():
    return make_indicators


# -------------------------------------------------------------------
# Fakes
# -------------------------------------------------------------------

class InMemoryFundStateStore:
    """Fund state store keeping the last saved snapshot"""

    def __init__(self, state: FundState = None):
        self.saved = state
        self.save_count = 0
        self.fail = False

    def load(self) -> FundState:
        return self.saved.snapshot() if self.saved else FundState()

    def save(self, state: FundState) -> None:
        if self.fail:
            raise PersistenceError("disk full")
        self.saved = state.snapshot()
        self.save_count += 1


class FakeNotifier:
    def __init__(self):
        self.messages: List[str] = []
        self.fail = False

    async def send(self, text: str) -> None:
        if self.fail:
            raise NotificationError("telegram down")
        self.messages.append(text)

    async def send_with_retry(self, text: str, max_retries: int = 3) -> None:
        await self.send(text)


class FakeRecorder:
    def __init__(self):
        self.weekly = []
        self.daily_checks = []
        self.fund_events = []
        self.monthly = []
        self.quarterly = []
        self.fail = False
        self.closed = False

    async def _append(self, bucket, item):
        if self.fail:
            raise PersistenceError("db locked")
        bucket.append(item)

    async def record_weekly(self, snapshot):
        await self._append(self.weekly, snapshot)

    async def record_daily_check(self, event):
        await self._append(self.daily_checks, event)

    async def record_fund_event(self, event):
        await self._append(self.fund_events, event)

    async def record_monthly(self, event):
        await self._append(self.monthly, event)

    async def record_quarterly(self, event):
        await self._append(self.quarterly, event)

    async def close(self):
        self.closed = True


class StaticCollector:
    """Collector returning a fixed indicator set (or failing)"""

    def __init__(self, indicators: MarketIndicators = None):
        self.indicators = indicators or make_indicators()
        self.fail = False
        self.calls = 0

    async def collect(self) -> MarketIndicators:
        self.calls += 1
        if self.fail:
            raise DataUnavailableError("yahoo timeout")
        return self.indicators


@pytest.fixture()
def store() -> InMemoryFundStateStore:
    return InMemoryFundStateStore()


@pytest.fixture()
async def fund_manager(store) -> FundManager:
    return await FundManager.open(store, Decimal("10000"))


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def recorder() -> FakeRecorder:
    return FakeRecorder()


@pytest.fixture()
def collector() -> StaticCollector:
    return StaticCollector()


@pytest.fixture()
def service(collector, fund_manager, notifier, recorder) -> SentinelService:
    return SentinelService(
        collector=collector,
        fund_manager=fund_manager,
        notifier=notifier,
        recorder=recorder,
    )


# -------------------------------------------------------------------
# API
# -------------------------------------------------------------------

@pytest.fixture()
def app(service) -> FastAPI:
    app = FastAPI()
    app.include_router(health.router, tags=["Health"])
    app.include_router(fund.router, prefix="/api/v1/fund", tags=["Fund"])
    app.include_router(signal.router, prefix="/api/v1/signal", tags=["Signal"])

    app.state.service = service
    app.state.scheduler = None
    app.state.telegram_bot = None
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
