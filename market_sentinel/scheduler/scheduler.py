"""
SCHEDULER BOOTSTRAP

Initializes and manages the APScheduler instance.
Scheduler is orchestration-only and contains no business logic.
"""

import logging

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from market_sentinel.config import Settings
from market_sentinel.scheduler.jobs import (
    run_daily_check_job,
    run_monthly_job,
    run_quarterly_job,
    run_weekly_job,
    run_weekly_reset_job,
)
from market_sentinel.services.orchestrator import SentinelService

_logger = logging.getLogger(__name__)


class SentinelScheduler:
    """Cron schedule for the five sentinel tasks"""

    def __init__(self, service: SentinelService, settings: Settings):
        self.service = service
        self.settings = settings
        self.timezone = pytz.timezone(settings.TIMEZONE)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)

    def _add(self, func, cron: str, job_id: str, name: str) -> None:
        self.scheduler.add_job(
            func,
            trigger=CronTrigger.from_crontab(cron, timezone=self.timezone),
            args=[self.service],
            id=job_id,
            name=name,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

    def register_jobs(self) -> None:
        s = self.settings
        self._add(run_weekly_job, s.WEEKLY_CRON, "weekly", "Weekly DCA")
        self._add(run_daily_check_job, s.DAILY_CRON, "daily_check", "Daily RSI Check")
        self._add(run_monthly_job, s.MONTHLY_CRON, "monthly", "Monthly Replenish")
        self._add(run_quarterly_job, s.QUARTERLY_CRON, "quarterly", "Quarterly Rebalance")
        self._add(run_weekly_reset_job, s.WEEKLY_RESET_CRON, "weekly_reset", "Weekly Flag Reset")

    def start(self) -> None:
        """Start the scheduler (requires a running event loop)"""
        self.register_jobs()
        self.scheduler.start()
        _logger.info("✅ Scheduler started")
        for job in self.scheduler.get_jobs():
            _logger.info("  • %s - next run: %s", job.name, job.next_run_time)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            _logger.info("🛑 Scheduler shut down")
