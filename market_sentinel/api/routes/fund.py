"""
Fund API Routes
Read-only view of the dual-pool fund
"""

from fastapi import APIRouter, Depends

from market_sentinel.api.dependencies import get_service
from market_sentinel.domain.schemas.fund import FundStateRecord
from market_sentinel.services.orchestrator import SentinelService

router = APIRouter()


@router.get("", response_model=FundStateRecord)
async def get_fund(service: SentinelService = Depends(get_service)):
    """Current fund snapshot"""
    state = await service.fund_manager.get_state()
    return FundStateRecord.from_state(state)
