"""Liveness route."""

from fastapi import APIRouter, Depends

from src.api.dependencies.governance import get_proxy_expiry_worker
from src.api.models.health import HealthResponse
from src.workers.proxy_expiry_worker import ProxyExpiryWorker

router = APIRouter(prefix="/v1", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    worker: ProxyExpiryWorker = Depends(get_proxy_expiry_worker),
) -> HealthResponse:
    """Report liveness and whether proxy expiry sweeps are running."""
    return HealthResponse(status="healthy", proxy_expiry_running=worker.running)
