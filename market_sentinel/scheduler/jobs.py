"""
SCHEDULER JOB DEFINITIONS

Jobs are thin wrappers that:
- Log execution
- Call the sentinel service
- Catch and log every failure so the scheduler keeps running

NO business logic is allowed here.
"""

import logging

from market_sentinel.services.orchestrator import SentinelService

_logger = logging.getLogger(__name__)


async def run_weekly_job(service: SentinelService) -> None:
    _logger.info("📅 Running weekly job")
    try:
        await service.run_weekly()
    except Exception:
        _logger.exception("Weekly job failed")


async def run_daily_check_job(service: SentinelService) -> None:
    _logger.info("🔎 Running daily check job")
    try:
        await service.run_daily_check()
    except Exception:
        _logger.exception("Daily check job failed")


async def run_monthly_job(service: SentinelService) -> None:
    _logger.info("💰 Running monthly job")
    try:
        await service.run_monthly()
    except Exception:
        _logger.exception("Monthly job failed")


async def run_quarterly_job(service: SentinelService) -> None:
    _logger.info("📊 Running quarterly job")
    try:
        await service.run_quarterly()
    except Exception:
        _logger.exception("Quarterly job failed")


async def run_weekly_reset_job(service: SentinelService) -> None:
    try:
        await service.reset_weekly_flags()
    except Exception:
        _logger.exception("Weekly reset job failed")
