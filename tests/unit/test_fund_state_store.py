"""
Unit Tests for JsonFundStateStore
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from market_sentinel.domain.errors import PersistenceError
from market_sentinel.domain.models import FundState
from market_sentinel.infrastructure.state.fund_state_store import JsonFundStateStore


@pytest.fixture()
def state_path(tmp_path):
    return tmp_path / "data" / "fund_state.json"


def test_missing_file_loads_uninitialized_state(state_path):
    state = JsonFundStateStore(state_path).load()
    assert not state.is_initialized
    assert state.regular_balance == Decimal("0")


def test_save_then_load_keeps_every_field(state_path):
    store = JsonFundStateStore(state_path)
    original = FundState(
        monthly_budget=Decimal("10000"),
        weekly_base_n=Decimal("1616.63"),
        regular_balance=Decimal("5383.37"),
        reserve_balance=Decimal("575.05"),
        bottom_fish_used_this_week=True,
        consecutive_high_score_weeks=2,
        recent_scores=[0.05, 1.55],
        last_replenish_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
        updated_at=datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc),
    )

    store.save(original)
    loaded = store.load()

    assert loaded.monthly_budget == original.monthly_budget
    assert loaded.weekly_base_n == original.weekly_base_n
    assert loaded.regular_balance == original.regular_balance
    assert loaded.reserve_balance == original.reserve_balance
    assert loaded.bottom_fish_used_this_week is True
    assert loaded.consecutive_high_score_weeks == 2
    assert loaded.recent_scores == [0.05, 1.55]
    assert loaded.last_replenish_at == original.last_replenish_at
    assert loaded.last_rebalance_at is None


def test_save_leaves_no_temp_files(state_path):
    store = JsonFundStateStore(state_path)
    store.save(FundState(monthly_budget=Decimal("10000")))
    store.save(FundState(monthly_budget=Decimal("12000")))

    assert [p.name for p in state_path.parent.iterdir()] == ["fund_state.json"]
    assert store.load().monthly_budget == Decimal("12000")


def test_corrupt_file_raises(state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFundStateStore(state_path).load()


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")

    with pytest.raises(PersistenceError):
        JsonFundStateStore(blocker / "fund_state.json").save(FundState())
