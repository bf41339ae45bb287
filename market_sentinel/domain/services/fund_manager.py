"""
FUND MANAGER (ENGINE-3)
Single point of mutation for the dual-pool fund

RESPONSIBILITIES:
- Seed the regular (70%) and reserve (30%) pools from the monthly budget
- Execute weekly, bottom-fish, replenish, rebalance and reset operations
- Persist every mutation before returning (write-through)

RULES:
❌ No network calls while holding the lock
❌ Balances never go negative (withdrawals capped)
❌ Weekly base N never changes after seeding
✅ One mutation at a time (asyncio.Lock)
✅ Callers only ever see snapshots
✅ Persistence failure is logged and reported, memory is NOT rolled back
"""

import asyncio
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

from market_sentinel.domain.errors import PersistenceError
from market_sentinel.domain.models import (
    BottomFishResult,
    FundState,
    RebalanceAction,
    RebalanceResult,
    ReplenishResult,
    TradeSignal,
    WeeklyInvestmentResult,
)
from market_sentinel.utils.time import now_utc

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class FundStateStore(Protocol):
    """Protocol for durable fund state storage (blocking I/O)"""

    def load(self) -> FundState:
        ...

    def save(self, state: FundState) -> None:
        ...


class FundManager:
    """
    Fund Manager
    Owns FundState; all public operations are serialized
    """

    REGULAR_SHARE = Decimal("0.70")
    RESERVE_SHARE = Decimal("0.30")
    WEEKS_PER_MONTH = Decimal("4.33")

    RECENT_SCORES_LIMIT = 12
    HIGH_SCORE_THRESHOLD = 1.0

    RESERVE_CEILING_N = Decimal("6")
    RESERVE_FLOOR_N = Decimal("3")
    HIGH_SCORE_WEEKS_FOR_TOPUP = 4

    def __init__(self, store: FundStateStore, state: FundState):
        """Use FundManager.open() to load or seed state"""
        self._store = store
        self._state = state
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, store: FundStateStore, monthly_budget: Decimal) -> "FundManager":
        """
        Load state from the store, seeding it on first run

        Subsequent loads never re-seed, even if the configured budget
        changed.

        Raises:
            PersistenceError: state unreadable, or the initial save failed
        """
        state = await asyncio.to_thread(store.load)

        if not state.is_initialized:
            state = cls.seed_state(monthly_budget)
            logger.info(
                "Fund state seeded: budget=%s N=%s regular=%s reserve=%s",
                state.monthly_budget, state.weekly_base_n,
                state.regular_balance, state.reserve_balance,
            )
        else:
            logger.info(
                "Fund state loaded: regular=%s reserve=%s",
                state.regular_balance, state.reserve_balance,
            )

        manager = cls(store, state)
        state.updated_at = now_utc()
        await asyncio.to_thread(store.save, state.snapshot())
        return manager

    @classmethod
    def seed_state(cls, monthly_budget: Decimal) -> FundState:
        """Fresh state: N = budget × 70% / 4.33, pools split 70/30"""
        monthly_budget = Decimal(str(monthly_budget))
        if monthly_budget <= Decimal("0"):
            raise ValueError("Monthly budget must be positive")

        regular = monthly_budget * cls.REGULAR_SHARE
        return FundState(
            monthly_budget=monthly_budget,
            weekly_base_n=to_money(regular / cls.WEEKS_PER_MONTH),
            regular_balance=to_money(regular),
            reserve_balance=to_money(monthly_budget * cls.RESERVE_SHARE),
        )

    async def get_state(self) -> FundState:
        """Consistent snapshot of the current state"""
        async with self._lock:
            return self._state.snapshot()

    # ------------------------------------------------------------------
    # OPERATIONS
    # ------------------------------------------------------------------

    async def weekly_investment(self, signal: TradeSignal) -> WeeklyInvestmentResult:
        """
        Withdraw the weekly amount for a signal's tier

        regular = N × multiplier (capped at regular balance)
        reserve = N × reserve_use (capped at reserve balance)
        Also tracks the score window and the high-score streak.
        """
        async with self._lock:
            state = self._state
            before = state.snapshot()
            base_n = state.weekly_base_n

            regular_amount = min(to_money(base_n * signal.tier.multiplier), state.regular_balance)
            reserve_amount = min(to_money(base_n * signal.tier.reserve_use), state.reserve_balance)

            state.regular_balance -= regular_amount
            state.reserve_balance -= reserve_amount

            state.recent_scores.append(signal.total_score)
            if len(state.recent_scores) > self.RECENT_SCORES_LIMIT:
                del state.recent_scores[:-self.RECENT_SCORES_LIMIT]

            if signal.total_score > self.HIGH_SCORE_THRESHOLD:
                state.consecutive_high_score_weeks += 1
            else:
                state.consecutive_high_score_weeks = 0

            persisted = await self._persist("weekly investment")

            logger.info(
                "Weekly investment: tier=%s regular=%s reserve=%s",
                signal.tier.label, regular_amount, reserve_amount,
            )
            return WeeklyInvestmentResult(
                regular_amount=regular_amount,
                reserve_amount=reserve_amount,
                state_before=before,
                state_after=state.snapshot(),
                persisted=persisted,
            )

    async def bottom_fish_investment(self, total_score: float) -> BottomFishResult:
        """
        Intra-week oversold withdrawal from the reserve pool only

        At most once per week; never rejected for insufficient funds,
        it withdraws whatever is left.
        """
        async with self._lock:
            state = self._state
            before = state.snapshot()

            if state.bottom_fish_used_this_week:
                logger.info("Bottom-fish already used this week, skipping")
                return BottomFishResult(
                    triggered=False,
                    amount=Decimal("0"),
                    state_before=before,
                    state_after=before,
                )

            multiplier = self.bottom_fish_multiplier(total_score)
            amount = min(to_money(state.weekly_base_n * multiplier), state.reserve_balance)

            state.reserve_balance -= amount
            state.bottom_fish_used_this_week = True

            persisted = await self._persist("bottom-fish")

            logger.info("Bottom-fish triggered: score=%+.3f amount=%s", total_score, amount)
            return BottomFishResult(
                triggered=True,
                amount=amount,
                state_before=before,
                state_after=state.snapshot(),
                persisted=persisted,
            )

    @staticmethod
    def bottom_fish_multiplier(total_score: float) -> Decimal:
        """Size of a bottom-fish withdrawal in units of N"""
        if total_score > 1.0:
            return Decimal("1.5")
        if total_score > 0:
            return Decimal("1.0")
        if total_score < -0.5:
            return Decimal("0.5")
        return Decimal("0.75")

    async def monthly_replenish(self) -> ReplenishResult:
        """Add budget × 70% to regular and budget × 30% to reserve (uncapped)"""
        async with self._lock:
            state = self._state
            before = state.snapshot()

            regular_added = to_money(state.monthly_budget * self.REGULAR_SHARE)
            reserve_added = to_money(state.monthly_budget * self.RESERVE_SHARE)

            state.regular_balance += regular_added
            state.reserve_balance += reserve_added
            state.last_replenish_at = now_utc()

            persisted = await self._persist("monthly replenish")

            logger.info("Monthly replenish: regular +%s reserve +%s", regular_added, reserve_added)
            return ReplenishResult(
                regular_added=regular_added,
                reserve_added=reserve_added,
                state_before=before,
                state_after=state.snapshot(),
                persisted=persisted,
            )

    async def quarterly_rebalance(self) -> RebalanceResult:
        """
        Quarterly reserve adjustment, exactly one branch per call:

        - reserve > 6N → move the excess to the regular pool
        - high-score streak ≥ 4 and reserve < 3N → top reserve up to 3N
          (external capital injection, not drawn from regular)
        - otherwise no-op
        """
        async with self._lock:
            state = self._state
            before = state.snapshot()
            ceiling = state.weekly_base_n * self.RESERVE_CEILING_N
            floor = state.weekly_base_n * self.RESERVE_FLOOR_N

            if state.reserve_balance > ceiling:
                amount = state.reserve_balance - ceiling
                state.reserve_balance -= amount
                state.regular_balance += amount
                action = RebalanceAction.TRANSFER_EXCESS
                message = "Reserve pool above 6N, excess moved to the regular pool"
            elif (
                state.consecutive_high_score_weeks >= self.HIGH_SCORE_WEEKS_FOR_TOPUP
                and state.reserve_balance < floor
            ):
                amount = floor - state.reserve_balance
                state.reserve_balance += amount
                action = RebalanceAction.EMERGENCY_TOPUP
                message = "Sustained high scores with a thin reserve, reserve topped up to 3N"
            else:
                amount = Decimal("0")
                action = RebalanceAction.NO_ACTION
                message = "Quarterly rebalance: no adjustment needed"

            state.last_rebalance_at = now_utc()
            persisted = await self._persist("quarterly rebalance")

            logger.info("Quarterly rebalance: %s amount=%s", action.value, amount)
            return RebalanceResult(
                action=action,
                amount=amount,
                message=message,
                state_before=before,
                state_after=state.snapshot(),
                persisted=persisted,
            )

    async def reset_weekly_flags(self) -> bool:
        """Clear the bottom-fish flag; returns whether the save succeeded"""
        async with self._lock:
            self._state.bottom_fish_used_this_week = False
            persisted = await self._persist("weekly flag reset")
            logger.info("Weekly flags reset")
            return persisted

    # ------------------------------------------------------------------
    # PERSISTENCE
    # ------------------------------------------------------------------

    async def _persist(self, operation: str) -> bool:
        """Write-through save; must be called with the lock held"""
        self._state.updated_at = now_utc()
        try:
            await asyncio.to_thread(self._store.save, self._state.snapshot())
        except PersistenceError as exc:
            logger.error("Failed to save fund state after %s: %s", operation, exc)
            return False
        return True
