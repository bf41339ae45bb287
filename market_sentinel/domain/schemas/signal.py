from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from market_sentinel.domain.models import MarketIndicators, TradeSignal


class IndicatorsRequest(BaseModel):
    current_price: float = Field(gt=0)
    ma200: float = Field(ge=0)
    ma20w: float = Field(ge=0)
    ma50w: float = Field(ge=0)
    weekly_rsi: float = Field(ge=0, le=100)
    daily_rsi: float = Field(ge=0, le=100)
    high_52w: float = 0.0
    low_52w: float = 0.0
    high_30d: float = 0.0
    low_30d: float = 0.0
    position_52w: float = Field(ge=0, le=1)

    def to_indicators(self) -> MarketIndicators:
        return MarketIndicators(**self.model_dump())


class FactorScoreResponse(BaseModel):
    name: str
    raw_score: float
    weight: float
    weighted: float
    commentary: str


class TradeSignalResponse(BaseModel):
    trigger_type: str
    total_score: float
    tier_label: str
    tier_multiplier: Decimal
    tier_reserve_use: Decimal
    base_amount: Decimal
    final_amount: Decimal
    reserve_used: Decimal
    warning_message: Optional[str] = None
    factors: List[FactorScoreResponse]

    @classmethod
    def from_signal(cls, signal: TradeSignal) -> "TradeSignalResponse":
        return cls(
            trigger_type=signal.trigger_type.value,
            total_score=signal.total_score,
            tier_label=signal.tier.label,
            tier_multiplier=signal.tier.multiplier,
            tier_reserve_use=signal.tier.reserve_use,
            base_amount=signal.base_amount,
            final_amount=signal.final_amount,
            reserve_used=signal.reserve_used,
            warning_message=signal.warning_message,
            factors=[
                FactorScoreResponse(
                    name=f.name,
                    raw_score=f.raw_score,
                    weight=f.weight,
                    weighted=f.weighted,
                    commentary=f.commentary,
                )
                for f in signal.factors
            ],
        )
