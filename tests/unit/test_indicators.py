import pytest

from market_sentinel.domain.errors import IndicatorInputError
from market_sentinel.domain.indicators.moving_average import ma200, ma20w, simple_moving_average
from market_sentinel.domain.indicators.ranges import (
    position_in_range,
    price_range,
    range_30_day,
    range_52_week,
)
from market_sentinel.domain.indicators.rsi import NEUTRAL_RSI, relative_strength_index


# -------------------------------------------------------------------
# Moving averages
# -------------------------------------------------------------------

def test_sma_uses_last_period_prices():
    assert simple_moving_average([1, 2, 3, 4, 5, 6, 7, 8, 9, 10], 5) == pytest.approx(8.0)


def test_sma_rejects_short_series_and_bad_period():
    with pytest.raises(IndicatorInputError):
        simple_moving_average([1, 2, 3], 5)
    with pytest.raises(IndicatorInputError):
        simple_moving_average([1, 2, 3], 0)


def test_ma200_needs_200_daily_bars(bars_factory):
    with pytest.raises(IndicatorInputError):
        ma200(bars_factory([100.0] * 199))
    assert ma200(bars_factory([100.0] * 50 + [200.0] * 200)) == pytest.approx(200.0)


def test_ma20w_is_also_a_value_error(bars_factory):
    # Callers that only know ValueError still catch indicator failures
    with pytest.raises(ValueError):
        ma20w(bars_factory([100.0] * 10))


# -------------------------------------------------------------------
# RSI
# -------------------------------------------------------------------

def test_rsi_short_history_is_neutral(bars_factory):
    assert relative_strength_index(bars_factory([100.0 + i for i in range(14)])) == NEUTRAL_RSI
    assert relative_strength_index(bars_factory([])) == NEUTRAL_RSI


def test_rsi_all_gains_is_100(bars_factory):
    assert relative_strength_index(bars_factory([100.0 + i for i in range(30)])) == 100.0


def test_rsi_all_losses_is_0(bars_factory):
    assert relative_strength_index(bars_factory([200.0 - i for i in range(30)])) == 0.0


def test_rsi_wilder_smoothing_known_value(bars_factory):
    # Seed from +1, -1 → 0.5 / 0.5; then +1 → gain 0.75, loss 0.25 → RS 3
    rsi = relative_strength_index(bars_factory([1.0, 2.0, 1.0, 2.0]), period=2)
    assert rsi == pytest.approx(75.0)


def test_rsi_bounded_for_noisy_series(bars_factory):
    closes = [100 + ((i * 7) % 11) - 5 for i in range(120)]
    rsi = relative_strength_index(bars_factory(closes))
    assert 0.0 <= rsi <= 100.0


def test_rsi_rejects_bad_period(bars_factory):
    with pytest.raises(IndicatorInputError):
        relative_strength_index(bars_factory([1.0, 2.0]), period=0)


# -------------------------------------------------------------------
# Ranges
# -------------------------------------------------------------------

def test_price_range_short_series_uses_everything(bars_factory):
    bars = bars_factory([100.0, 120.0, 90.0])
    high, low = price_range(bars, 252)
    assert high == pytest.approx(120.0 * 1.01)
    assert low == pytest.approx(90.0 * 0.99)


def test_range_30_day_only_sees_last_22_bars(bars_factory):
    closes = [1000.0] + [100.0] * 22
    high, _ = range_30_day(bars_factory(closes))
    assert high == pytest.approx(101.0)

    high_52w, _ = range_52_week(bars_factory(closes))
    assert high_52w == pytest.approx(1010.0)


def test_price_range_rejects_empty_and_bad_window(bars_factory):
    with pytest.raises(IndicatorInputError):
        price_range([], 10)
    with pytest.raises(IndicatorInputError):
        price_range(bars_factory([1.0]), 0)


@pytest.mark.parametrize(
    "price,high,low,expected",
    [
        (5.0, 10.0, 0.0, 0.5),
        (10.0, 10.0, 0.0, 1.0),
        (0.0, 10.0, 0.0, 0.0),
        (15.0, 10.0, 0.0, 1.0),
        (-3.0, 10.0, 0.0, 0.0),
        (7.0, 7.0, 7.0, 0.5),
    ],
)
def test_position_in_range(price, high, low, expected):
    assert position_in_range(price, high, low) == pytest.approx(expected)


def test_position_in_range_is_idempotent():
    first = position_in_range(5800.0, 6000.0, 5000.0)
    assert position_in_range(5800.0, 6000.0, 5000.0) == first


def test_position_in_range_rejects_inverted_range():
    with pytest.raises(IndicatorInputError):
        position_in_range(5.0, 1.0, 10.0)
