"""
CampusNotes Backend — Health Check Route
=========================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Answers without touching the record store or blob storage, so a slow
       remote service never makes the process look dead.
Paths: /health (probes) and /api/health (frontend, alongside the other API routes).
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from campusnotes.schemas.note import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/api/health", response_model=HealthResponse, include_in_schema=False)
@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns OK with the current server time while the process is serving requests.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc),
        message="CampusNotes API is running",
    )
