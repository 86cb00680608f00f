"""Settings API schemas: company users, ads accounts, alert settings, invitations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.application.dtos.settings import AdsAccountRow, AlertSettingsResult, UserRow
from app.domain.entities.invitation import InvitationEntity
from app.domain.enums import UserRole
from app.shared.utils.sanitization import sanitize_text


class UserRowResponse(BaseModel):
    """One row of the company users table."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    user_type: str
    user_access: str | None = None
    avatar: str | None = None
    is_google_sign_up: bool = False

    @classmethod
    def from_row(cls, row: UserRow) -> "UserRowResponse":
        return cls.model_validate(row)


class UserListResponse(BaseModel):
    """Company users; loaded is False only when the first load failed."""

    items: list[UserRowResponse]
    loaded: bool


class AdsAccountRowResponse(BaseModel):
    """Connected ads account with its display name and member user ids."""

    id: str
    name: str
    selected_user_ids: list[str]
    currency_symbol: str | None = None
    platform: str | None = None
    monthly_budget: float | None = None
    daily_budget: float | None = None

    @classmethod
    def from_row(cls, row: AdsAccountRow) -> "AdsAccountRowResponse":
        return cls(
            id=row.id,
            name=row.name,
            selected_user_ids=[ref.id for ref in row.selected_users],
            currency_symbol=row.currency_symbol,
            platform=row.platform,
            monthly_budget=row.monthly_budget,
            daily_budget=row.daily_budget,
        )


class AdsAccountListResponse(BaseModel):
    items: list[AdsAccountRowResponse]
    loaded: bool


class AlertSettingsResponse(BaseModel):
    """Alert toggles of the signed-in user; id is None when no document exists yet."""

    id: str | None = None
    user_id: str
    toggles: dict[str, bool] = Field(default_factory=dict)

    @classmethod
    def from_result(
        cls, result: AlertSettingsResult | None, user_id: str
    ) -> "AlertSettingsResponse":
        if result is None:
            return cls(user_id=user_id)
        return cls(id=result.id, user_id=result.user_id, toggles=result.toggles)


class AlertSettingsUpdateRequest(BaseModel):
    """Partial update: alert name → enabled."""

    toggles: dict[str, bool] = Field(..., min_length=1)


class InvitationRequest(BaseModel):
    """Request body for inviting a user into the caller's company."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    role: UserRole
    ads_account_ids: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError("name must not be empty")
        return cleaned


class InvitationResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    ads_account_ids: list[str]
    status: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_entity(cls, invitation_id: str, entity: InvitationEntity) -> "InvitationResponse":
        return cls(
            id=invitation_id,
            email=entity.email,
            name=entity.name,
            role=entity.role.value,
            ads_account_ids=[ref.id for ref in entity.ads_accounts],
            status=entity.status.value,
            created_at=entity.created_at,
            expires_at=entity.expires_at,
        )
