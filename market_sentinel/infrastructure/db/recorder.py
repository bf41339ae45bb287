"""
History Recorder
Append-only record of evaluations and fund events for later analysis
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from market_sentinel.domain.errors import PersistenceError
from market_sentinel.domain.models import FundState, MarketIndicators, TradeSignal
from market_sentinel.infrastructure.db.database import (
    create_engine_for_path,
    create_session_factory,
    init_db,
)
from market_sentinel.infrastructure.db.models import (
    DailyCheckModel,
    FundHistoryModel,
    MonthlyEventModel,
    QuarterlyEventModel,
    WeeklySnapshotModel,
)
from market_sentinel.utils.time import now_utc, to_epoch

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# EVENTS
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class WeeklySnapshot:
    indicators: MarketIndicators
    signal: TradeSignal
    fund_state: FundState


@dataclass(frozen=True)
class DailyCheckEvent:
    daily_rsi: float
    weekly_rsi: float
    price: float
    event_type: str
    amount: Decimal = Decimal("0")
    total_score: float = 0.0


@dataclass(frozen=True)
class FundEvent:
    event_type: str
    regular_before: Decimal
    regular_after: Decimal
    reserve_before: Decimal
    reserve_after: Decimal
    amount: Decimal
    note: str = ""

    @classmethod
    def from_states(
        cls,
        event_type: str,
        before: FundState,
        after: FundState,
        amount: Decimal,
        note: str = "",
    ) -> "FundEvent":
        return cls(
            event_type=event_type,
            regular_before=before.regular_balance,
            regular_after=after.regular_balance,
            reserve_before=before.reserve_balance,
            reserve_after=after.reserve_balance,
            amount=amount,
            note=note,
        )


@dataclass(frozen=True)
class MonthlyEvent:
    regular_added: Decimal
    reserve_added: Decimal
    regular_after: Decimal
    reserve_after: Decimal
    avg_score: float = 0.0


@dataclass(frozen=True)
class QuarterlyEvent:
    action: str
    amount: Decimal
    regular_after: Decimal
    reserve_after: Decimal
    note: str = ""


class HistoryRecorder(Protocol):
    """All methods raise PersistenceError on failure"""

    async def record_weekly(self, snapshot: WeeklySnapshot) -> None:
        ...

    async def record_daily_check(self, event: DailyCheckEvent) -> None:
        ...

    async def record_fund_event(self, event: FundEvent) -> None:
        ...

    async def record_monthly(self, event: MonthlyEvent) -> None:
        ...

    async def record_quarterly(self, event: QuarterlyEvent) -> None:
        ...

    async def close(self) -> None:
        ...


# ----------------------------------------------------------------------
# IMPLEMENTATIONS
# ----------------------------------------------------------------------

class NoopHistoryRecorder:
    """Discards everything; used when no history store is configured"""

    async def record_weekly(self, snapshot: WeeklySnapshot) -> None:
        return None

    async def record_daily_check(self, event: DailyCheckEvent) -> None:
        return None

    async def record_fund_event(self, event: FundEvent) -> None:
        return None

    async def record_monthly(self, event: MonthlyEvent) -> None:
        return None

    async def record_quarterly(self, event: QuarterlyEvent) -> None:
        return None

    async def close(self) -> None:
        return None


class SQLiteHistoryRecorder:
    """SQLite history store (SQLAlchemy async over aiosqlite)"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    @classmethod
    async def open(cls, path: str) -> "SQLiteHistoryRecorder":
        """
        Open (or create) the database file and its tables

        Raises:
            PersistenceError: database could not be opened or migrated
        """
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine_for_path(path)
        try:
            await init_db(engine)
        except SQLAlchemyError as exc:
            await engine.dispose()
            raise PersistenceError(f"Failed to open history database {path}: {exc}") from exc

        logger.info("SQLite history recorder opened: %s", path)
        return cls(engine)

    async def _insert(self, row) -> None:
        try:
            async with self.session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to insert into {row.__tablename__}: {exc}") from exc

    @staticmethod
    def _now() -> int:
        return to_epoch(now_utc())

    async def record_weekly(self, snapshot: WeeklySnapshot) -> None:
        ind = snapshot.indicators
        signal = snapshot.signal
        state = snapshot.fund_state

        factors = [f.weighted for f in signal.factors[:5]]
        factors += [0.0] * (5 - len(factors))

        await self._insert(WeeklySnapshotModel(
            timestamp=self._now(),
            current_price=ind.current_price,
            ma200=ind.ma200,
            ma20w=ind.ma20w,
            ma50w=ind.ma50w,
            weekly_rsi=ind.weekly_rsi,
            daily_rsi=ind.daily_rsi,
            high_52w=ind.high_52w,
            low_52w=ind.low_52w,
            position_52w=ind.position_52w,
            factor1_score=factors[0],
            factor2_score=factors[1],
            factor3_score=factors[2],
            factor4_score=factors[3],
            factor5_score=factors[4],
            total_score=signal.total_score,
            tier_label=signal.tier.label,
            tier_multiplier=float(signal.tier.multiplier),
            tier_reserve=float(signal.tier.reserve_use),
            base_amount=float(signal.base_amount),
            final_amount=float(signal.final_amount),
            reserve_used=float(signal.reserve_used),
            regular_balance=float(state.regular_balance),
            reserve_balance=float(state.reserve_balance),
        ))

    async def record_daily_check(self, event: DailyCheckEvent) -> None:
        await self._insert(DailyCheckModel(
            timestamp=self._now(),
            daily_rsi=event.daily_rsi,
            weekly_rsi=event.weekly_rsi,
            price=event.price,
            event_type=event.event_type,
            amount=float(event.amount),
            total_score=event.total_score,
        ))

    async def record_fund_event(self, event: FundEvent) -> None:
        await self._insert(FundHistoryModel(
            timestamp=self._now(),
            event_type=event.event_type,
            regular_before=float(event.regular_before),
            regular_after=float(event.regular_after),
            reserve_before=float(event.reserve_before),
            reserve_after=float(event.reserve_after),
            amount=float(event.amount),
            note=event.note,
        ))

    async def record_monthly(self, event: MonthlyEvent) -> None:
        await self._insert(MonthlyEventModel(
            timestamp=self._now(),
            regular_added=float(event.regular_added),
            reserve_added=float(event.reserve_added),
            regular_after=float(event.regular_after),
            reserve_after=float(event.reserve_after),
            avg_score=event.avg_score,
        ))

    async def record_quarterly(self, event: QuarterlyEvent) -> None:
        await self._insert(QuarterlyEventModel(
            timestamp=self._now(),
            action=event.action,
            amount=float(event.amount),
            regular_after=float(event.regular_after),
            reserve_after=float(event.reserve_after),
            note=event.note,
        ))

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("SQLite history recorder closed")


async def open_recorder(path: Optional[str]) -> HistoryRecorder:
    """SQLite recorder for a configured path, no-op otherwise or on open failure"""
    if not path:
        logger.info("History recording disabled (no HISTORY_DB_PATH)")
        return NoopHistoryRecorder()
    try:
        return await SQLiteHistoryRecorder.open(path)
    except (PersistenceError, OSError) as exc:
        logger.warning("History recorder unavailable, continuing without it: %s", exc)
        return NoopHistoryRecorder()
