"""Auth API schemas (registration and current user)."""

from pydantic import BaseModel, Field, field_validator

from app.domain.entities.user import UserDocument
from app.shared.utils.sanitization import sanitize_text


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register.

    Email and uid come from the verified ID token; only the display name
    may be supplied (Google sign-ins fall back to the token's name claim).
    """

    name: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str | None) -> str | None:
        return sanitize_text(v) or None


class CurrentUserResponse(BaseModel):
    """The signed-in user and the company they belong to."""

    id: str
    email: str
    name: str
    user_type: str
    company_admin_id: str
    avatar: str | None = None
    is_google_sign_up: bool = False

    @classmethod
    def from_user(cls, user: UserDocument) -> "CurrentUserResponse":
        return cls(
            id=user.uid,
            email=user.email,
            name=user.name,
            user_type=user.role.value,
            company_admin_id=user.company_admin.id,
            avatar=user.avatar,
            is_google_sign_up=user.is_google_sign_up,
        )


class RegisterResponse(BaseModel):
    """Result of registration; created is False for an existing user."""

    user: CurrentUserResponse
    created: bool
