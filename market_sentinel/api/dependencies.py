from fastapi import HTTPException, Request

from market_sentinel.services.orchestrator import SentinelService


def get_service(request: Request) -> SentinelService:
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return service
