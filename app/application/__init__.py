"""Application layer: interfaces, DTOs and services.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (record store, payments, email, storage).
"""

from app.application.interfaces import (
    IAvatarStorage,
    ICountryNameResolver,
    IEmailDispatcher,
    IPaymentGateway,
    IRecordStore,
)
from app.application.services import (
    CompanyDeletionService,
    RegistrationService,
    SettingsSession,
    SettingsSessionRegistry,
    SettingsSyncStore,
    SubscriptionProvisioningService,
    UserAdsAccountsStore,
)

__all__ = [
    "CompanyDeletionService",
    "IAvatarStorage",
    "ICountryNameResolver",
    "IEmailDispatcher",
    "IPaymentGateway",
    "IRecordStore",
    "RegistrationService",
    "SettingsSession",
    "SettingsSessionRegistry",
    "SettingsSyncStore",
    "SubscriptionProvisioningService",
    "UserAdsAccountsStore",
]
