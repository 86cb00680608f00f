"""Account registration: first sign-in of a new company admin."""

from __future__ import annotations

from app.application.interfaces.repositories import IRecordStore
from app.application.services.settings_sync import user_ref
from app.domain.collections import COLLECTION_ALERT_SETTINGS
from app.domain.entities.alert_settings import DEFAULT_ALERT_SETTINGS
from app.domain.entities.user import UserDocument
from app.domain.enums import UserRole
from app.domain.exceptions import ValidationException
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class RegistrationService:
    """Create the user document (and default alert settings) for a new identity.

    Signing in again with an identity that already has a user document,
    e.g. repeated Google sign-ins, returns that document unchanged.
    """

    def __init__(self, records: IRecordStore) -> None:
        self._records = records

    async def register(
        self,
        uid: str,
        email: str,
        name: str,
        is_google_sign_up: bool = False,
    ) -> tuple[UserDocument, bool]:
        """Return (user, created)."""
        normalized = (email or "").strip().lower()
        if not normalized or "@" not in normalized:
            raise ValidationException("A valid email is required", field="email")

        ref = user_ref(uid)
        existing = await self._records.get(ref)
        if existing is not None:
            return UserDocument.from_document(uid, existing.data), False

        data = {
            "email": normalized,
            "Name": name.strip(),
            "User Type": UserRole.ADMIN.value,
            "Company Admin": ref,
            "Is Google Sign Up": is_google_sign_up,
            "Avatar": None,
            "Email Notifications": True,
            "Weekly Summary": True,
            "Created At": utc_now(),
        }
        await self._records.set(ref, data)
        await self._records.add(
            COLLECTION_ALERT_SETTINGS, {"User": ref, **DEFAULT_ALERT_SETTINGS}
        )
        logger.info("Registered company admin %s", uid)
        return UserDocument.from_document(uid, data), True
