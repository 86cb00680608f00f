"""View rows held by the settings stores (flat, UI-ready)."""

from dataclasses import dataclass
from typing import Any

from app.domain.value_objects.core import DocumentRef


@dataclass(frozen=True)
class UserRow:
    """One row of the company users table."""

    id: str
    email: str
    name: str
    user_type: str
    user_access: str | None = None
    avatar: str | None = None
    is_google_sign_up: bool = False


@dataclass(frozen=True)
class AdsAccountRow:
    """A connected ads account with its resolved display name and membership."""

    id: str
    name: str
    selected_users: tuple[DocumentRef, ...] = ()
    currency_symbol: str | None = None
    platform: str | None = None
    monthly_budget: float | None = None
    daily_budget: float | None = None


@dataclass(frozen=True)
class AlertSettingsResult:
    """Alert settings document of one user."""

    id: str
    user_id: str
    toggles: dict[str, bool]


@dataclass(frozen=True)
class BillingRecord:
    """A billing mirror document (subscription, payment method or Stripe company)."""

    id: str
    data: dict[str, Any]
