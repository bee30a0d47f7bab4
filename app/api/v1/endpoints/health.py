"""Health check endpoints. No dependencies; used for liveness and readiness checks."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.infrastructure.firebase import get_firestore_client
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    return HealthResponse()


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Firestore not configured", "model": ReadinessErrorResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """Return 200 when the object store client is configured; 503 otherwise."""
    cache = getattr(request.app.state, "cache", None)
    if get_firestore_client() is None:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(message="Firestore not configured").model_dump(),
        )
    return ReadinessResponse(cache=bool(cache and cache.is_available()))
