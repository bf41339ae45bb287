import math

import pytest

from market_sentinel.domain.strategy import factor_ladders as ladders
from market_sentinel.domain.strategy.tier_policy import (
    FLOOR_TIER,
    get_tier_table,
    map_tier,
    validate_tier_table,
)


@pytest.mark.parametrize(
    "score,label",
    [
        (1.5, "extreme-heavy"),
        (1.49999, "heavy"),
        (1.2, "heavy"),
        (0.8, "add"),
        (0.79, "normal"),
        (0.0, "normal"),
        (-0.01, "reduced"),
        (-0.8, "reduced"),
        (-1.5, "light/watch"),
        (-1.50001, "minimum"),
        (math.inf, "extreme-heavy"),
        (-math.inf, "minimum"),
    ],
)
def test_map_tier_boundaries(score, label):
    assert map_tier(score).label == label


def test_map_tier_rejects_nan():
    with pytest.raises(ValueError):
        map_tier(float("nan"))


def test_reserve_use_only_on_top_tiers():
    assert map_tier(2.0).uses_reserve
    assert map_tier(1.3).uses_reserve
    assert map_tier(0.9).uses_reserve
    assert not map_tier(0.1).uses_reserve
    assert not FLOOR_TIER.uses_reserve


def test_static_tables_are_valid():
    validate_tier_table()
    ladders.validate_factor_weights()
    ladders.validate_ladder(ladders.MA200_DEVIATION_LADDER, ladders.MA200_DEVIATION_CEILING)
    ladders.validate_ladder(ladders.RSI_LADDER, ladders.RSI_CEILING)
    ladders.validate_ladder(ladders.POSITION_52W_LADDER, ladders.POSITION_52W_EXTREME)


def test_validate_ladder_rejects_unordered_bounds():
    with pytest.raises(ValueError):
        ladders.validate_ladder(((10.0, 1.0), (5.0, 0.0)), -1.0)
    with pytest.raises(ValueError):
        ladders.validate_ladder(((5.0, 0.0), (10.0, 1.0)), -1.0)


def test_tier_table_for_display_ends_with_floor():
    table = get_tier_table()
    assert table[-1] == (-math.inf, FLOOR_TIER)
    assert len(table) == 7


@pytest.mark.parametrize(
    "value,expected",
    [(-25.0, 2.0), (-20.0, 2.0), (-19.9, 1.5), (0.0, 0.5), (4.9, 0.0), (20.0, -1.5), (20.1, -2.0)],
)
def test_ma200_ladder_edges(value, expected):
    score = ladders.score_from_ladder(
        value, ladders.MA200_DEVIATION_LADDER, ladders.MA200_DEVIATION_CEILING
    )
    assert score == expected
