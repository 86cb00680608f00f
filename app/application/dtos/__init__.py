"""Application DTOs (no Firestore or HTTP dependency)."""

from app.application.dtos.billing import (
    BillingAddress,
    BillingForm,
    CustomerResult,
    InvoiceResult,
    PaymentMethodResult,
    ProvisioningResult,
    SubscriptionResult,
)
from app.application.dtos.record import FieldFilter, Record
from app.application.dtos.settings import (
    AdsAccountRow,
    AlertSettingsResult,
    BillingRecord,
    UserRow,
)
from app.application.dtos.user import AvatarUpload, UserUpdate

__all__ = [
    "AdsAccountRow",
    "AlertSettingsResult",
    "AvatarUpload",
    "BillingAddress",
    "BillingForm",
    "BillingRecord",
    "CustomerResult",
    "FieldFilter",
    "InvoiceResult",
    "PaymentMethodResult",
    "ProvisioningResult",
    "Record",
    "SubscriptionResult",
    "UserRow",
    "UserUpdate",
]
