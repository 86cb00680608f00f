"""Pydantic request/response schemas for the API."""

from app.schemas.ads_account import (
    CurrencySymbolRequest,
    SelectAdsAccountRequest,
    UserAdsAccountsResponse,
)
from app.schemas.auth import CurrentUserResponse, RegisterRequest, RegisterResponse
from app.schemas.billing import (
    BillingAddressRequest,
    BillingRecordResponse,
    InvoiceResponse,
    PriceResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from app.schemas.company import DeletionResponse
from app.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from app.schemas.settings import (
    AdsAccountListResponse,
    AdsAccountRowResponse,
    AlertSettingsResponse,
    AlertSettingsUpdateRequest,
    InvitationRequest,
    InvitationResponse,
    UserListResponse,
    UserRowResponse,
)

__all__ = [
    "AdsAccountListResponse",
    "AdsAccountRowResponse",
    "AlertSettingsResponse",
    "AlertSettingsUpdateRequest",
    "BillingAddressRequest",
    "BillingRecordResponse",
    "CurrencySymbolRequest",
    "CurrentUserResponse",
    "DeletionResponse",
    "HealthResponse",
    "InvitationRequest",
    "InvitationResponse",
    "InvoiceResponse",
    "PriceResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
    "RegisterRequest",
    "RegisterResponse",
    "SelectAdsAccountRequest",
    "SubscribeRequest",
    "SubscribeResponse",
    "UserAdsAccountsResponse",
    "UserListResponse",
    "UserRowResponse",
]
