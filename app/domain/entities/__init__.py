"""Domain entities and rules.

Pure domain models; no Firestore or HTTP concerns.
"""

from app.domain.entities.ads_account import (
    format_account_number,
    has_member,
    resolve_ads_account_name,
)
from app.domain.entities.alert_settings import (
    ALERT_SETTING_FIELDS,
    DEFAULT_ALERT_SETTINGS,
)
from app.domain.entities.invitation import INVITATION_TTL, InvitationEntity
from app.domain.entities.subscription import calculate_subscription_price
from app.domain.entities.user import UserDocument

__all__ = [
    "ALERT_SETTING_FIELDS",
    "DEFAULT_ALERT_SETTINGS",
    "INVITATION_TTL",
    "InvitationEntity",
    "UserDocument",
    "calculate_subscription_price",
    "format_account_number",
    "has_member",
    "resolve_ads_account_name",
]
