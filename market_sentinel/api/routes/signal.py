"""
Signal API Routes
Manual weekly run and side-effect-free evaluation
"""

from fastapi import APIRouter, Depends, HTTPException

from market_sentinel.api.dependencies import get_service
from market_sentinel.domain.models import TriggerType
from market_sentinel.domain.schemas.signal import IndicatorsRequest, TradeSignalResponse
from market_sentinel.services.orchestrator import SentinelService

router = APIRouter()


@router.post("/weekly", response_model=TradeSignalResponse)
async def run_weekly(service: SentinelService = Depends(get_service)):
    """
    Run the weekly cycle now (moves funds, notifies, records)
    """
    signal = await service.run_weekly(TriggerType.MANUAL)
    if signal is None:
        raise HTTPException(status_code=503, detail="Market data unavailable")
    return TradeSignalResponse.from_signal(signal)


@router.post("/evaluate", response_model=TradeSignalResponse)
async def evaluate(
    request: IndicatorsRequest,
    service: SentinelService = Depends(get_service),
):
    """
    Score a supplied indicator set (no fund movement)
    """
    signal = await service.evaluate(request.to_indicators())
    return TradeSignalResponse.from_signal(signal)
