from fastapi import APIRouter, Request

from market_sentinel import __version__

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    state = request.app.state

    scheduler = getattr(state, "scheduler", None)
    scheduler_status = "disabled"
    if scheduler is not None:
        scheduler_status = "running" if scheduler.running else "stopped"

    bot = getattr(state, "telegram_bot", None)
    telegram_status = "disabled"
    if bot is not None:
        telegram_status = "running" if bot.application is not None else "stopped"

    return {
        "status": "healthy" if getattr(state, "service", None) is not None else "starting",
        "service": "MarketSentinel",
        "version": __version__,
        "services": {
            "api": "running",
            "scheduler": scheduler_status,
            "telegram": telegram_status,
        },
    }
