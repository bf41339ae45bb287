"""
Unit Tests for the scheduler and its jobs
"""

import pytest

from market_sentinel.config import Settings
from market_sentinel.scheduler import jobs
from market_sentinel.scheduler.scheduler import SentinelScheduler


class ExplodingService:
    async def run_weekly(self):
        raise RuntimeError("boom")

    async def run_daily_check(self):
        raise RuntimeError("boom")

    async def run_monthly(self):
        raise RuntimeError("boom")

    async def run_quarterly(self):
        raise RuntimeError("boom")

    async def reset_weekly_flags(self):
        raise RuntimeError("boom")


@pytest.fixture()
def settings(monkeypatch, tmp_path) -> Settings:
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.yml"))
    return Settings(_env_file=None, TIMEZONE="UTC")


async def test_register_jobs(service, settings):
    scheduler = SentinelScheduler(service, settings)
    scheduler.register_jobs()

    jobs_by_id = {job.id: job for job in scheduler.scheduler.get_jobs()}
    assert set(jobs_by_id) == {"weekly", "daily_check", "monthly", "quarterly", "weekly_reset"}
    assert jobs_by_id["weekly"].func is jobs.run_weekly_job
    assert jobs_by_id["weekly"].args == (service,)
    assert jobs_by_id["daily_check"].max_instances == 1
    assert not scheduler.running


async def test_start_and_stop(service, settings):
    scheduler = SentinelScheduler(service, settings)
    scheduler.start()
    assert scheduler.running

    scheduler.stop()
    assert not scheduler.running


@pytest.mark.parametrize(
    "job",
    [
        jobs.run_weekly_job,
        jobs.run_daily_check_job,
        jobs.run_monthly_job,
        jobs.run_quarterly_job,
        jobs.run_weekly_reset_job,
    ],
)
async def test_jobs_swallow_failures(job, caplog):
    await job(ExplodingService())
    assert "failed" in caplog.text


async def test_weekly_job_runs_service(service, notifier):
    await jobs.run_weekly_job(service)
    assert notifier.messages
