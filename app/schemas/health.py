"""Health check API schemas."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health (liveness)."""

    status: str = Field(default="ok", description="Service status")


class ReadinessResponse(BaseModel):
    """Response for GET /health/ready when ready."""

    status: str = Field(default="ok", description="Readiness status")
    firestore: bool = Field(default=True, description="Firestore client configured")
    stripe: bool = Field(default=False, description="Stripe secret key configured")


class ReadinessErrorResponse(BaseModel):
    """Response for GET /health/ready when a required collaborator is missing (503)."""

    status: str = Field(default="not_ready", description="Readiness status")
    message: str = Field(..., description="Reason (e.g. Firestore not configured)")
