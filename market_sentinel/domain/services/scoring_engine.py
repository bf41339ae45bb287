"""
SCORING ENGINE (ENGINE-2)
Convert market indicators into a weighted trade signal

RESPONSIBILITIES:
- Score five independent market factors
- Combine weighted scores into a composite
- Map composite to an investment tier
- Attach take-profit warning on overheated RSI

RULES:
❌ No fund mutation
❌ No network, no persistence
✅ Deterministic output
✅ Position factor scored last (needs the other four)
"""

import logging
import math
from typing import Optional

from market_sentinel.domain.models import (
    FactorScore,
    MarketIndicators,
    TradeSignal,
    TriggerType,
)
from market_sentinel.domain.strategy import factor_ladders as ladders
from market_sentinel.domain.strategy.tier_policy import map_tier

logger = logging.getLogger(__name__)

TAKE_PROFIT_WARNING = "⚠️ RSI > 85 take-profit warning: consider partial profit taking"


class ScoringEngine:
    """
    Scoring Engine
    Multi-factor model producing a TradeSignal from MarketIndicators
    """

    def evaluate(
        self,
        indicators: MarketIndicators,
        trigger_type: TriggerType = TriggerType.WEEKLY,
    ) -> TradeSignal:
        """
        Evaluate a full trade signal

        Order matters: MA200, weekly RSI, daily RSI and trend are scored
        first; their raw mean feeds the 52-week position factor.

        Args:
            indicators: Indicator set for this cycle
            trigger_type: What triggered the evaluation

        Returns:
            TradeSignal with factors, total score and tier (amounts unset)
        """
        ma200_factor = self.score_ma200_deviation(indicators)
        weekly_factor = self.score_weekly_rsi(indicators)
        daily_factor = self.score_daily_rsi(indicators)
        trend_factor = self.score_trend_tracker(indicators)

        others_mean = (
            ma200_factor.raw_score
            + weekly_factor.raw_score
            + daily_factor.raw_score
            + trend_factor.raw_score
        ) / 4.0

        position_factor = self.score_position_52w(indicators, others_mean)

        factors = (ma200_factor, weekly_factor, daily_factor, position_factor, trend_factor)
        total_score = sum(f.weighted for f in factors)
        tier = map_tier(total_score)

        signal = TradeSignal(
            factors=factors,
            total_score=total_score,
            tier=tier,
            trigger_type=trigger_type,
            warning_message=self._take_profit_warning(indicators),
        )

        logger.info(
            "Signal evaluated: score=%+.3f tier=%s trigger=%s",
            total_score, tier.label, trigger_type.value,
        )
        return signal

    # ------------------------------------------------------------------
    # FACTORS
    # ------------------------------------------------------------------

    @staticmethod
    def _factor(name: str, raw_score: float, commentary: str) -> FactorScore:
        weight = ladders.FACTOR_WEIGHTS[name]
        return FactorScore(
            name=name,
            raw_score=raw_score,
            weight=weight,
            weighted=raw_score * weight,
            commentary=commentary,
        )

    def score_ma200_deviation(self, indicators: MarketIndicators) -> FactorScore:
        deviation = indicators.ma200_deviation_pct
        if deviation is None:
            return self._factor(ladders.MA200_DEVIATION, 0.0, "MA200 unavailable")

        score = ladders.score_from_ladder(
            deviation, ladders.MA200_DEVIATION_LADDER, ladders.MA200_DEVIATION_CEILING
        )
        return self._factor(ladders.MA200_DEVIATION, score, f"deviation {deviation:+.1f}%")

    def score_weekly_rsi(self, indicators: MarketIndicators) -> FactorScore:
        rsi = indicators.weekly_rsi
        score = ladders.score_from_ladder(rsi, ladders.RSI_LADDER, ladders.RSI_CEILING)
        return self._factor(ladders.WEEKLY_RSI, score, f"RSI={rsi:.0f}")

    def score_daily_rsi(self, indicators: MarketIndicators) -> FactorScore:
        rsi = indicators.daily_rsi
        score = ladders.score_from_ladder(rsi, ladders.RSI_LADDER, ladders.RSI_CEILING)
        return self._factor(ladders.DAILY_RSI, score, f"RSI={rsi:.0f}")

    def score_position_52w(
        self,
        indicators: MarketIndicators,
        others_mean: float,
    ) -> FactorScore:
        """
        52-week position factor

        Above the top bound, the extreme score needs confirmation from the
        other four factors (their mean below the threshold); otherwise the
        score is capped.
        """
        position_pct = indicators.position_52w * 100
        top_bound = ladders.POSITION_52W_LADDER[-1][0]

        if position_pct > top_bound:
            if others_mean < ladders.POSITION_52W_CONFIRMATION:
                score = ladders.POSITION_52W_EXTREME
            else:
                score = ladders.POSITION_52W_CAPPED
        else:
            score = ladders.score_from_ladder(
                position_pct, ladders.POSITION_52W_LADDER, ladders.POSITION_52W_EXTREME
            )

        return self._factor(ladders.POSITION_52W, score, f"position={position_pct:.0f}%")

    def score_trend_tracker(self, indicators: MarketIndicators) -> FactorScore:
        """
        Trend factor

        Bullish: price > MA20w > MA50w
        Bearish: price < MA20w < MA50w
        Near extreme: within 1% of the 30-day high (bullish) / low (bearish)
        """
        price = indicators.current_price
        bullish = price > indicators.ma20w > indicators.ma50w
        bearish = price < indicators.ma20w < indicators.ma50w

        near_high = self._is_near(price, indicators.high_30d)
        near_low = self._is_near(price, indicators.low_30d)

        if bullish and near_high:
            score, commentary = ladders.TREND_BULLISH_AT_HIGH, "bullish alignment + 30d high"
        elif bullish:
            score, commentary = ladders.TREND_BULLISH, "bullish alignment"
        elif bearish and near_low:
            score, commentary = ladders.TREND_BEARISH_AT_LOW, "bearish alignment + 30d low"
        elif bearish:
            score, commentary = ladders.TREND_BEARISH, "bearish alignment"
        else:
            score, commentary = ladders.TREND_NEUTRAL, "range-bound"

        return self._factor(ladders.TREND_TRACKER, score, commentary)

    # ------------------------------------------------------------------
    # HELPERS
    # ------------------------------------------------------------------

    @staticmethod
    def _is_near(price: float, extreme: float) -> bool:
        if extreme == 0 or math.isnan(extreme):
            return False
        return abs(price - extreme) / extreme < ladders.TREND_NEAR_EXTREME_PCT

    @staticmethod
    def _take_profit_warning(indicators: MarketIndicators) -> Optional[str]:
        if (
            indicators.daily_rsi > ladders.TAKE_PROFIT_RSI
            or indicators.weekly_rsi > ladders.TAKE_PROFIT_RSI
        ):
            return TAKE_PROFIT_WARNING
        return None
