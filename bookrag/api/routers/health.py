"""
Health check API endpoint.

Routes: GET /health

Reports circuit breaker states; any open breaker makes the service
"degraded" rather than unhealthy, since fallbacks keep answering.

Dependencies: bookrag.core.resilience
System role: Health check HTTP API
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookrag.api.deps import get_container
from bookrag.application.container import RagContainer
from bookrag.core.resilience import BreakerState


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    breakers: dict[str, str]


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check(container: RagContainer = Depends(get_container)) -> HealthResponse:
    """Basic health check with breaker states."""
    breakers = container.breakers.states()
    degraded = any(state != BreakerState.CLOSED.value for state in breakers.values())
    return HealthResponse(status="degraded" if degraded else "healthy", breakers=breakers)
