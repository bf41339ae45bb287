"""
SENTINEL SERVICE (ORCHESTRATION)

Sequences one cycle per scheduled task:
collect indicators → evaluate → fund operation (persisted) → notify → record

RULES:
❌ No network I/O while the fund lock is held (fund operations are awaited
   to completion before any send)
❌ A notification or recording failure never undoes a fund mutation
✅ Every task is safe to call from a scheduler job or a chat command
"""

import dataclasses
import logging
from decimal import Decimal
from typing import Optional

from market_sentinel.domain.errors import (
    DataUnavailableError,
    NotificationError,
    PersistenceError,
)
from market_sentinel.domain.models import (
    MarketIndicators,
    RebalanceAction,
    TradeSignal,
    TriggerType,
)
from market_sentinel.domain.services.fund_manager import FundManager
from market_sentinel.domain.services.scoring_engine import ScoringEngine
from market_sentinel.domain.strategy.factor_ladders import TAKE_PROFIT_RSI
from market_sentinel.infrastructure.db.recorder import (
    DailyCheckEvent,
    FundEvent,
    HistoryRecorder,
    MonthlyEvent,
    QuarterlyEvent,
    WeeklySnapshot,
)
from market_sentinel.services.collector import IndicatorCollector
from market_sentinel.services.notification_service import Notifier
from market_sentinel.telegram import formatters

logger = logging.getLogger(__name__)

BOTTOM_FISH_RSI = 30.0


class SentinelService:
    """Wires collector, scoring engine, fund manager, notifier and recorder"""

    def __init__(
        self,
        collector: IndicatorCollector,
        fund_manager: FundManager,
        notifier: Notifier,
        recorder: HistoryRecorder,
        engine: Optional[ScoringEngine] = None,
        notify_max_retries: int = 3,
    ):
        self.collector = collector
        self.fund_manager = fund_manager
        self.notifier = notifier
        self.recorder = recorder
        self.engine = engine or ScoringEngine()
        self.notify_max_retries = notify_max_retries

    # ------------------------------------------------------------------
    # TASKS
    # ------------------------------------------------------------------

    async def run_weekly(self, trigger_type: TriggerType = TriggerType.WEEKLY) -> Optional[TradeSignal]:
        """
        Weekly DCA cycle

        Returns:
            The executed signal with amounts filled in, or None when
            indicator collection failed
        """
        logger.info("Running weekly task")
        try:
            indicators = await self.collector.collect()
        except DataUnavailableError as exc:
            logger.error("Weekly collect failed: %s", exc)
            await self._notify(formatters.format_collect_failure("Weekly", exc))
            return None

        signal = self.engine.evaluate(indicators, trigger_type)
        result = await self.fund_manager.weekly_investment(signal)

        signal = dataclasses.replace(
            signal,
            base_amount=result.state_before.weekly_base_n,
            final_amount=result.final_amount,
            reserve_used=result.reserve_amount,
        )

        report = formatters.format_weekly_report(indicators, signal)
        report += "\n" + formatters.format_fund_status(result.state_after)
        await self._notify(report)

        await self._record(self.recorder.record_weekly(WeeklySnapshot(
            indicators=indicators,
            signal=signal,
            fund_state=result.state_after,
        )), "weekly snapshot")
        await self._record_fund_event(
            TriggerType.WEEKLY.value, result.state_before, result.state_after,
            result.final_amount, f"weekly DCA ({signal.tier.label})",
        )
        return signal

    async def run_daily_check(self) -> Optional[MarketIndicators]:
        """
        Daily RSI check: bottom-fish on oversold, warn on overbought

        Collection failure aborts silently (logged, no notification).
        """
        logger.info("Running daily check")
        try:
            indicators = await self.collector.collect()
        except DataUnavailableError as exc:
            logger.error("Daily collect failed: %s", exc)
            return None

        if indicators.daily_rsi < BOTTOM_FISH_RSI:
            await self._bottom_fish(indicators)

        if indicators.daily_rsi > TAKE_PROFIT_RSI or indicators.weekly_rsi > TAKE_PROFIT_RSI:
            await self._notify(formatters.format_take_profit(indicators))
            await self._record(self.recorder.record_daily_check(DailyCheckEvent(
                daily_rsi=indicators.daily_rsi,
                weekly_rsi=indicators.weekly_rsi,
                price=indicators.current_price,
                event_type=TriggerType.TAKE_PROFIT.value,
            )), "take-profit check")

        return indicators

    async def _bottom_fish(self, indicators: MarketIndicators) -> None:
        signal = self.engine.evaluate(indicators, TriggerType.BOTTOM_FISH)
        result = await self.fund_manager.bottom_fish_investment(signal.total_score)
        if not result.triggered:
            return

        await self._notify(formatters.format_bottom_fish(indicators, signal.total_score, result.amount))
        await self._record(self.recorder.record_daily_check(DailyCheckEvent(
            daily_rsi=indicators.daily_rsi,
            weekly_rsi=indicators.weekly_rsi,
            price=indicators.current_price,
            event_type=TriggerType.BOTTOM_FISH.value,
            amount=result.amount,
            total_score=signal.total_score,
        )), "bottom-fish check")
        await self._record_fund_event(
            TriggerType.BOTTOM_FISH.value, result.state_before, result.state_after,
            result.amount, "bottom-fish",
        )

    async def run_monthly(self) -> None:
        logger.info("Running monthly task")
        result = await self.fund_manager.monthly_replenish()
        state = result.state_after

        await self._notify(formatters.format_monthly_summary(state))

        await self._record(self.recorder.record_monthly(MonthlyEvent(
            regular_added=result.regular_added,
            reserve_added=result.reserve_added,
            regular_after=state.regular_balance,
            reserve_after=state.reserve_balance,
            avg_score=state.average_recent_score or 0.0,
        )), "monthly event")
        await self._record_fund_event(
            TriggerType.MONTHLY.value, result.state_before, state,
            result.regular_added + result.reserve_added, "monthly replenish",
        )

    async def run_quarterly(self) -> RebalanceAction:
        logger.info("Running quarterly rebalance")
        result = await self.fund_manager.quarterly_rebalance()
        state = result.state_after

        await self._notify(formatters.format_quarterly(result))

        await self._record(self.recorder.record_quarterly(QuarterlyEvent(
            action=result.action.value,
            amount=result.amount,
            regular_after=state.regular_balance,
            reserve_after=state.reserve_balance,
            note=result.message,
        )), "quarterly event")
        await self._record_fund_event(
            TriggerType.QUARTERLY.value, result.state_before, state,
            result.amount, result.message,
        )
        return result.action

    async def reset_weekly_flags(self) -> None:
        await self.fund_manager.reset_weekly_flags()

    async def evaluate(self, indicators: MarketIndicators) -> TradeSignal:
        """Score an indicator set without touching the fund"""
        return self.engine.evaluate(indicators, TriggerType.MANUAL)

    # ------------------------------------------------------------------
    # COMMANDS
    # ------------------------------------------------------------------

    async def handle_command(self, text: str) -> str:
        """
        Reply text for a chat command

        /weekly sends its own report and returns an empty reply.
        """
        parts = (text or "").split()
        # "/fund@SomeBot" in group chats
        command = parts[0].split("@")[0].lower() if parts else ""

        if command == "/weekly":
            signal = await self.run_weekly(TriggerType.MANUAL)
            return "" if signal is not None else "❌ Weekly evaluation failed, see logs"
        if command == "/fund":
            return formatters.format_fund_status(await self.fund_manager.get_state())
        if command == "/monthly":
            return formatters.format_monthly_summary(await self.fund_manager.get_state())
        if command == "/tiers":
            return formatters.format_tier_table()
        return formatters.HELP_TEXT

    # ------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------

    async def _notify(self, text: str) -> bool:
        try:
            await self.notifier.send_with_retry(text, self.notify_max_retries)
        except NotificationError as exc:
            logger.error("Notification failed: %s", exc)
            return False
        return True

    async def _record(self, write, what: str) -> None:
        try:
            await write
        except PersistenceError as exc:
            logger.error("Failed to record %s: %s", what, exc)

    async def _record_fund_event(self, event_type, before, after, amount: Decimal, note: str) -> None:
        await self._record(
            self.recorder.record_fund_event(
                FundEvent.from_states(event_type, before, after, amount, note)
            ),
            f"{event_type} fund event",
        )
