"""Auth API: registration on first sign-in, current user, logout.

Identity (passwords, Google sign-in) lives with Firebase Auth; these routes
take a verified ID token and manage the user document behind it.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, Response

from app.api.v1.dependencies import (
    CurrentUser,
    get_registration_service,
    get_session_registry,
    get_token_claims,
)
from app.application.services.registration_service import RegistrationService
from app.application.services.sync_session import SettingsSessionRegistry
from app.core.limiter import limit_register
from app.domain.exceptions import ValidationException
from app.schemas.auth import CurrentUserResponse, RegisterRequest, RegisterResponse
from app.shared.utils.sanitization import sanitize_text

router = APIRouter()

GOOGLE_PROVIDER = "google.com"


def _sign_in_provider(claims: dict[str, Any]) -> str | None:
    firebase = claims.get("firebase") or {}
    return firebase.get("sign_in_provider")


@router.post("/register", response_model=RegisterResponse)
@limit_register
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    claims: Annotated[dict[str, Any], Depends(get_token_claims)],
    service: Annotated[RegistrationService, Depends(get_registration_service)],
) -> RegisterResponse:
    """Create the company admin user for this identity (201), or return the existing one (200)."""
    email = claims.get("email")
    if not email:
        raise ValidationException("The identity has no email address", field="email")
    name = body.name or sanitize_text(claims.get("name")) or email.split("@", 1)[0]
    user, created = await service.register(
        uid=claims["sub"],
        email=email,
        name=name,
        is_google_sign_up=_sign_in_provider(claims) == GOOGLE_PROVIDER,
    )
    response.status_code = 201 if created else 200
    return RegisterResponse(user=CurrentUserResponse.from_user(user), created=created)


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(user: CurrentUser) -> CurrentUserResponse:
    """Return the signed-in user."""
    return CurrentUserResponse.from_user(user)


@router.post("/logout", status_code=204)
async def logout(
    user: CurrentUser,
    registry: Annotated[SettingsSessionRegistry, Depends(get_session_registry)],
) -> None:
    """Drop the user's settings session (cached slices are reloaded on next use)."""
    await registry.discard(user.uid)
