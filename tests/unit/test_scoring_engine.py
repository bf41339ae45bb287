"""
Unit Tests for ScoringEngine

✅ Composite score and tier for a known indicator set
✅ Position factor confirmation rule
✅ Take-profit warning
"""

import pytest

from market_sentinel.domain.models import TriggerType
from market_sentinel.domain.services.scoring_engine import TAKE_PROFIT_WARNING, ScoringEngine
from market_sentinel.domain.strategy import factor_ladders as ladders


@pytest.fixture()
def engine():
    return ScoringEngine()


def test_neutral_market_scores_normal_tier(engine, indicators_factory):
    signal = engine.evaluate(indicators_factory())

    assert len(signal.factors) == 5
    assert [f.name for f in signal.factors] == list(ladders.FACTOR_ORDER)
    assert signal.warning_message is None

    assert signal.factor(ladders.MA200_DEVIATION).raw_score == 0.0
    assert signal.factor(ladders.WEEKLY_RSI).raw_score == 0.0
    assert signal.factor(ladders.DAILY_RSI).raw_score == 0.0
    assert signal.factor(ladders.TREND_TRACKER).raw_score == 1.0
    assert signal.factor(ladders.POSITION_52W).raw_score == -1.0

    assert signal.total_score == pytest.approx(0.05)
    assert signal.tier.label == "normal"
    assert signal.trigger_type == TriggerType.WEEKLY


def test_weights_sum_to_one(engine, indicators_factory):
    signal = engine.evaluate(indicators_factory())
    assert sum(f.weight for f in signal.factors) == pytest.approx(1.0)
    for factor in signal.factors:
        assert factor.weighted == pytest.approx(factor.raw_score * factor.weight)


def test_evaluation_is_deterministic(engine, indicators_factory):
    indicators = indicators_factory(weekly_rsi=33.0, daily_rsi=61.0)
    assert engine.evaluate(indicators) == engine.evaluate(indicators)


@pytest.mark.parametrize("weekly_rsi,daily_rsi", [(88.0, 50.0), (50.0, 90.0)])
def test_overheated_rsi_attaches_warning(engine, indicators_factory, weekly_rsi, daily_rsi):
    signal = engine.evaluate(indicators_factory(weekly_rsi=weekly_rsi, daily_rsi=daily_rsi))
    assert signal.warning_message == TAKE_PROFIT_WARNING


def test_overbought_market_lands_in_light_watch(engine, indicators_factory):
    indicators = indicators_factory(
        current_price=6500.0,
        ma200=5500.0,
        ma20w=6300.0,
        ma50w=6000.0,
        weekly_rsi=88.0,
        daily_rsi=90.0,
        high_30d=6500.0,
        position_52w=1.0,
    )
    signal = engine.evaluate(indicators)

    # Others mean = (-1.5 - 2 - 2 + 1.5) / 4 = -1.0, not below the threshold
    assert signal.factor(ladders.POSITION_52W).raw_score == -1.0
    assert signal.total_score == pytest.approx(-1.2)
    assert signal.tier.label == "light/watch"
    assert signal.warning_message


def test_position_extreme_needs_confirmation(engine, indicators_factory):
    calm = indicators_factory(position_52w=0.99)
    factor = engine.score_position_52w(calm, others_mean=0.25)
    assert factor.raw_score == -1.0

    factor = engine.score_position_52w(calm, others_mean=-1.0)
    assert factor.raw_score == -1.0

    factor = engine.score_position_52w(calm, others_mean=-1.01)
    assert factor.raw_score == -2.0


def test_position_extreme_through_full_evaluation(engine, indicators_factory):
    indicators = indicators_factory(
        current_price=6700.0,
        ma200=5500.0,
        ma20w=6400.0,
        ma50w=6000.0,
        weekly_rsi=90.0,
        daily_rsi=90.0,
        high_30d=6700.0,
        position_52w=0.99,
    )
    signal = engine.evaluate(indicators)
    assert signal.factor(ladders.POSITION_52W).raw_score == -2.0


def test_missing_ma200_scores_zero(engine, indicators_factory):
    factor = engine.score_ma200_deviation(indicators_factory(ma200=0.0))
    assert factor.raw_score == 0.0
    assert factor.commentary == "MA200 unavailable"


@pytest.mark.parametrize(
    "overrides,expected",
    [
        (dict(current_price=5900.0, high_30d=5920.0), 1.5),
        (dict(current_price=5900.0, high_30d=6200.0), 1.0),
        (dict(current_price=5000.0, ma20w=5200.0, ma50w=5400.0, low_30d=4990.0), -1.0),
        (dict(current_price=5000.0, ma20w=5200.0, ma50w=5400.0, low_30d=4500.0), -0.5),
        (dict(current_price=5700.0, ma20w=5750.0, ma50w=5600.0), 0.0),
    ],
)
def test_trend_tracker(engine, indicators_factory, overrides, expected):
    assert engine.score_trend_tracker(indicators_factory(**overrides)).raw_score == expected


def test_trend_ignores_zero_extremes(engine, indicators_factory):
    factor = engine.score_trend_tracker(indicators_factory(high_30d=0.0))
    assert factor.raw_score == 1.0


def test_deep_oversold_market_uses_reserve(engine, indicators_factory):
    indicators = indicators_factory(
        current_price=4400.0,
        ma200=5700.0,
        ma20w=4800.0,
        ma50w=5200.0,
        weekly_rsi=22.0,
        daily_rsi=20.0,
        high_30d=5200.0,
        low_30d=4390.0,
        position_52w=0.05,
    )
    signal = engine.evaluate(indicators)
    assert signal.total_score >= 1.5
    assert signal.tier.label == "extreme-heavy"
    assert signal.tier.uses_reserve


def test_unknown_factor_lookup_raises(engine, indicators_factory):
    signal = engine.evaluate(indicators_factory())
    with pytest.raises(KeyError):
        signal.factor("Volume")
