"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class TriggerType(str, Enum):
    """What triggered a signal or fund event"""
    WEEKLY = "WEEKLY"
    BOTTOM_FISH = "BOTTOM_FISH"
    TAKE_PROFIT = "TAKE_PROFIT"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    MANUAL = "MANUAL"


class RebalanceAction(str, Enum):
    """Outcome of a quarterly rebalance"""
    TRANSFER_EXCESS = "TRANSFER_EXCESS"
    EMERGENCY_TOPUP = "EMERGENCY_TOPUP"
    NO_ACTION = "NO_ACTION"


@dataclass(frozen=True)
class Bar:
    """OHLCV candlestick - Immutable"""
    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass(frozen=True)
class MarketIndicators:
    """Indicator set for one evaluation cycle - Immutable"""
    current_price: float
    ma200: float
    ma20w: float
    ma50w: float
    weekly_rsi: float
    daily_rsi: float
    high_52w: float
    low_52w: float
    high_30d: float
    low_30d: float
    position_52w: float

    @property
    def ma200_deviation_pct(self) -> Optional[float]:
        """Percent distance of price from MA200, None when MA200 is unavailable"""
        if self.ma200 == 0:
            return None
        return (self.current_price - self.ma200) / self.ma200 * 100


@dataclass(frozen=True)
class FactorScore:
    """Single factor scoring result - Immutable"""
    name: str
    raw_score: float
    weight: float
    weighted: float
    commentary: str


@dataclass(frozen=True)
class InvestmentTier:
    """Investment sizing policy selected by composite score"""
    label: str
    multiplier: Decimal
    reserve_use: Decimal

    @property
    def uses_reserve(self) -> bool:
        return self.reserve_use > Decimal('0')


@dataclass(frozen=True)
class TradeSignal:
    """
    Output of the scoring model.

    Amount fields are zero until the fund manager has executed the
    signal; use dataclasses.replace() to attach them.
    """
    factors: Tuple[FactorScore, ...]
    total_score: float
    tier: InvestmentTier
    trigger_type: TriggerType = TriggerType.WEEKLY
    base_amount: Decimal = Decimal('0')
    final_amount: Decimal = Decimal('0')
    reserve_used: Decimal = Decimal('0')
    warning_message: Optional[str] = None

    def factor(self, name: str) -> FactorScore:
        """Get factor by name"""
        for factor in self.factors:
            if factor.name == name:
                return factor
        raise KeyError(f"Factor not found: {name}")


@dataclass
class FundState:
    """
    Dual-pool fund state.

    Mutated only by FundManager. Everything handed to callers is a
    snapshot() copy.
    """
    monthly_budget: Decimal = Decimal('0')
    weekly_base_n: Decimal = Decimal('0')
    regular_balance: Decimal = Decimal('0')
    reserve_balance: Decimal = Decimal('0')
    bottom_fish_used_this_week: bool = False
    consecutive_high_score_weeks: int = 0
    recent_scores: List[float] = field(default_factory=list)
    last_replenish_at: Optional[datetime] = None
    last_rebalance_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_initialized(self) -> bool:
        return self.monthly_budget > Decimal('0')

    @property
    def total_balance(self) -> Decimal:
        return self.regular_balance + self.reserve_balance

    @property
    def average_recent_score(self) -> Optional[float]:
        if not self.recent_scores:
            return None
        return sum(self.recent_scores) / len(self.recent_scores)

    def snapshot(self) -> "FundState":
        return deepcopy(self)


@dataclass(frozen=True)
class WeeklyInvestmentResult:
    """Result of a weekly withdrawal"""
    regular_amount: Decimal
    reserve_amount: Decimal
    state_before: FundState
    state_after: FundState
    persisted: bool = True

    @property
    def final_amount(self) -> Decimal:
        return self.regular_amount + self.reserve_amount


@dataclass(frozen=True)
class BottomFishResult:
    """Result of an intra-week bottom-fish attempt"""
    triggered: bool
    amount: Decimal
    state_before: FundState
    state_after: FundState
    persisted: bool = True


@dataclass(frozen=True)
class ReplenishResult:
    """Result of a monthly replenishment"""
    regular_added: Decimal
    reserve_added: Decimal
    state_before: FundState
    state_after: FundState
    persisted: bool = True


@dataclass(frozen=True)
class RebalanceResult:
    """Result of a quarterly rebalance"""
    action: RebalanceAction
    amount: Decimal
    message: str
    state_before: FundState
    state_after: FundState
    persisted: bool = True
