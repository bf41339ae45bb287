from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from market_sentinel.domain.models import FundState


class FundStateRecord(BaseModel):
    """Persisted / API shape of FundState"""
    monthly_budget: Decimal
    weekly_base_n: Decimal
    regular_balance: Decimal = Field(ge=0)
    reserve_balance: Decimal = Field(ge=0)
    bottom_fish_used_this_week: bool = False
    consecutive_high_score_weeks: int = Field(default=0, ge=0)
    recent_scores: List[float] = Field(default_factory=list, max_length=12)
    last_replenish_at: Optional[datetime] = None
    last_rebalance_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_state(cls, state: FundState) -> "FundStateRecord":
        return cls(
            monthly_budget=state.monthly_budget,
            weekly_base_n=state.weekly_base_n,
            regular_balance=state.regular_balance,
            reserve_balance=state.reserve_balance,
            bottom_fish_used_this_week=state.bottom_fish_used_this_week,
            consecutive_high_score_weeks=state.consecutive_high_score_weeks,
            recent_scores=list(state.recent_scores),
            last_replenish_at=state.last_replenish_at,
            last_rebalance_at=state.last_rebalance_at,
            updated_at=state.updated_at,
        )

    def to_state(self) -> FundState:
        return FundState(
            monthly_budget=self.monthly_budget,
            weekly_base_n=self.weekly_base_n,
            regular_balance=self.regular_balance,
            reserve_balance=self.reserve_balance,
            bottom_fish_used_this_week=self.bottom_fish_used_this_week,
            consecutive_high_score_weeks=self.consecutive_high_score_weeks,
            recent_scores=list(self.recent_scores),
            last_replenish_at=self.last_replenish_at,
            last_rebalance_at=self.last_rebalance_at,
            updated_at=self.updated_at,
        )
