"""
Integration Tests for API routes
"""

import pytest

pytestmark = pytest.mark.integration


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "MarketSentinel"
    assert body["services"]["scheduler"] == "disabled"
    assert body["services"]["telegram"] == "disabled"


async def test_fund_snapshot(client):
    response = await client.get("/api/v1/fund")

    assert response.status_code == 200
    body = response.json()
    assert float(body["regular_balance"]) == 7000.0
    assert float(body["reserve_balance"]) == 3000.0
    assert float(body["weekly_base_n"]) == 1616.63
    assert body["bottom_fish_used_this_week"] is False


async def test_manual_weekly_run(client, notifier):
    response = await client.post("/api/v1/signal/weekly")

    assert response.status_code == 200
    body = response.json()
    assert body["trigger_type"] == "MANUAL"
    assert body["tier_label"] == "normal"
    assert float(body["final_amount"]) == 1616.63
    assert len(body["factors"]) == 5
    assert len(notifier.messages) == 1

    fund = (await client.get("/api/v1/fund")).json()
    assert float(fund["regular_balance"]) == 5383.37


async def test_manual_weekly_run_without_data(client, collector):
    collector.fail = True

    response = await client.post("/api/v1/signal/weekly")
    assert response.status_code == 503


async def test_evaluate_does_not_move_funds(client):
    payload = {
        "current_price": 4400.0,
        "ma200": 5700.0,
        "ma20w": 4800.0,
        "ma50w": 5200.0,
        "weekly_rsi": 22.0,
        "daily_rsi": 20.0,
        "high_30d": 5200.0,
        "low_30d": 4390.0,
        "position_52w": 0.05,
    }

    response = await client.post("/api/v1/signal/evaluate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["tier_label"] == "extreme-heavy"
    assert float(body["final_amount"]) == 0.0

    fund = (await client.get("/api/v1/fund")).json()
    assert float(fund["reserve_balance"]) == 3000.0


async def test_evaluate_rejects_out_of_range_rsi(client):
    response = await client.post("/api/v1/signal/evaluate", json={
        "current_price": 5000.0, "ma200": 5000.0, "ma20w": 5000.0, "ma50w": 5000.0,
        "weekly_rsi": 140.0, "daily_rsi": 50.0, "position_52w": 0.5,
    })
    assert response.status_code == 422


async def test_service_not_ready(app, client):
    app.state.service = None

    response = await client.get("/api/v1/fund")
    assert response.status_code == 503
    assert (await client.get("/health")).json()["status"] == "starting"
