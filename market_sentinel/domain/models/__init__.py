"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Enums
    RebalanceAction,
    TriggerType,

    # Entities
    Bar,
    BottomFishResult,
    FactorScore,
    FundState,
    InvestmentTier,
    MarketIndicators,
    RebalanceResult,
    ReplenishResult,
    TradeSignal,
    WeeklyInvestmentResult,
)

__all__ = [
    # Enums
    "RebalanceAction",
    "TriggerType",

    # Entities
    "Bar",
    "BottomFishResult",
    "FactorScore",
    "FundState",
    "InvestmentTier",
    "MarketIndicators",
    "RebalanceResult",
    "ReplenishResult",
    "TradeSignal",
    "WeeklyInvestmentResult",
]
