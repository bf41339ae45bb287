"""
FastAPI Main Application with Scheduler and Telegram Bot
Complete orchestration of all services in one process
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from market_sentinel import __version__
from market_sentinel.api.routes import fund, health, signal
from market_sentinel.config import Settings, settings
from market_sentinel.core.logging import setup_logging
from market_sentinel.domain.services.fund_manager import FundManager
from market_sentinel.infrastructure.db.recorder import HistoryRecorder, open_recorder
from market_sentinel.infrastructure.market_data.provider_factory import build_fetcher
from market_sentinel.infrastructure.state.fund_state_store import JsonFundStateStore
from market_sentinel.scheduler.jobs import run_weekly_job
from market_sentinel.scheduler.scheduler import SentinelScheduler
from market_sentinel.services.collector import IndicatorCollector
from market_sentinel.services.notification_service import TelegramNotifier
from market_sentinel.services.orchestrator import SentinelService
from market_sentinel.telegram.bot import CommandBot

logger = logging.getLogger(__name__)


async def build_service(config: Settings) -> tuple[SentinelService, HistoryRecorder]:
    """
    Assemble the sentinel service from configuration

    Raises:
        PersistenceError: fund state could not be loaded or seeded
    """
    fund_manager = await FundManager.open(
        JsonFundStateStore(config.FUND_STATE_FILE),
        config.MONTHLY_BUDGET,
    )
    recorder = await open_recorder(config.HISTORY_DB_PATH)
    notifier = TelegramNotifier(
        bot_token=config.TELEGRAM_BOT_TOKEN if config.TELEGRAM_ENABLED else None,
        chat_id=config.TELEGRAM_CHAT_ID,
        proxy=config.HTTPS_PROXY,
    )
    collector = IndicatorCollector(build_fetcher(config), config.SYMBOL)

    service = SentinelService(
        collector=collector,
        fund_manager=fund_manager,
        notifier=notifier,
        recorder=recorder,
        notify_max_retries=config.NOTIFY_MAX_RETRIES,
    )
    return service, recorder


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of all services
    """
    # ===================
    # STARTUP
    # ===================
    setup_logging(
        settings.LOG_LEVEL,
        settings.LOG_FILE,
        settings.LOG_MAX_BYTES,
        settings.LOG_BACKUP_COUNT,
    )
    logger.info("=" * 60)
    logger.info("🚀 Starting MarketSentinel %s", __version__)
    logger.info("=" * 60)

    settings.validate_runtime()

    service, recorder = await build_service(settings)
    app.state.service = service
    logger.info("✅ Service ready: symbol=%s", settings.SYMBOL)

    scheduler: Optional[SentinelScheduler] = None
    if settings.SCHEDULER_ENABLED:
        scheduler = SentinelScheduler(service, settings)
        scheduler.start()
    else:
        logger.info("⏰ Scheduler disabled")
    app.state.scheduler = scheduler

    telegram_bot: Optional[CommandBot] = None
    if settings.TELEGRAM_ENABLED:
        telegram_bot = CommandBot(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID, service)
        try:
            await telegram_bot.start_async()
        except Exception as exc:
            logger.error("❌ Failed to start Telegram bot: %s", exc)
            telegram_bot = None
    else:
        logger.info("📱 Telegram bot disabled")
    app.state.telegram_bot = telegram_bot

    startup_task: Optional[asyncio.Task] = None
    if settings.RUN_ON_START:
        logger.info("▶️  RUN_ON_START: running weekly task now")
        startup_task = asyncio.create_task(run_weekly_job(service))

    logger.info("🎯 API Server: http://%s:%s", settings.API_HOST, settings.API_PORT)

    yield

    # ===================
    # SHUTDOWN
    # ===================
    logger.info("🛑 Shutting down MarketSentinel...")

    if startup_task and not startup_task.done():
        startup_task.cancel()
        try:
            await startup_task
        except asyncio.CancelledError:
            logger.info("Startup weekly task cancelled")

    if scheduler:
        scheduler.stop()

    if telegram_bot:
        await telegram_bot.stop_async()

    await recorder.close()
    logger.info("👋 MarketSentinel shutdown complete")


app = FastAPI(
    title="MarketSentinel",
    description="Multi-factor DCA decision engine with a dual-pool fund",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health.router, tags=["Health"])
app.include_router(fund.router, prefix="/api/v1/fund", tags=["Fund"])
app.include_router(signal.router, prefix="/api/v1/signal", tags=["Signal"])
