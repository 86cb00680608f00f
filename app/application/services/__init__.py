"""Application services: settings stores, lifecycle orchestration, sessions."""

from app.application.services.ads_account_selection import UserAdsAccountsStore
from app.application.services.company_deletion import (
    CompanyDeletionService,
    DeletionReport,
)
from app.application.services.registration_service import RegistrationService
from app.application.services.settings_sync import (
    SettingsSyncStore,
    user_has_access,
)
from app.application.services.subscription_provisioning import (
    SubscriptionProvisioningService,
)
from app.application.services.sync_session import (
    SettingsSession,
    SettingsSessionRegistry,
)

__all__ = [
    "CompanyDeletionService",
    "DeletionReport",
    "RegistrationService",
    "SettingsSession",
    "SettingsSessionRegistry",
    "SettingsSyncStore",
    "SubscriptionProvisioningService",
    "UserAdsAccountsStore",
    "user_has_access",
]
