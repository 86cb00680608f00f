"""Health check endpoints. No auth; used for liveness and readiness probes."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.infrastructure.firebase.client import get_firestore_client
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
def readiness_check() -> ReadinessResponse | JSONResponse:
    """Return 200 when the Firestore client is initialized, else 503.

    Stripe is reported but not required: without it only billing routes fail.
    """
    stripe_configured = get_settings().stripe_secret_key is not None
    if get_firestore_client() is None:
        return JSONResponse(
            status_code=503,
            content=ReadinessErrorResponse(
                message="Firestore not configured",
            ).model_dump(),
        )
    return ReadinessResponse(firestore=True, stripe=stripe_configured)
