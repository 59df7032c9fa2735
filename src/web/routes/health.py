"""Liveness probe."""

from datetime import datetime, timezone

from fastapi import APIRouter

from web.models import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
async def healthz():
    return HealthResponse(
        status="ok",
        service="boomer-ai",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
