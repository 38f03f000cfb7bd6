"""Health check endpoints."""

from fastapi import APIRouter, Depends

from ..deps import get_engine_state
from ..models import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])

API_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
def health_check(engine_state: str = Depends(get_engine_state)) -> HealthResponse:
    """Report liveness and whether the knowledge engine finished loading."""
    return HealthResponse(status="ok", version=API_VERSION, rag_engine=engine_state)
