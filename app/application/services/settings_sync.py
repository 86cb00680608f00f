"""Settings synchronization store: cached company slices and the mutations that keep them consistent.

One instance per settings session. Each slice (users, ads accounts, alert
settings, billing mirrors) has its own loaded flag: fetch_* returns
immediately when the slice is loaded, refresh_* always queries. Remote
failures while fetching are recorded on ``error`` and not raised; failures
during mutations are recorded and re-raised.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

from app.application.dtos.record import FieldFilter, Record
from app.application.dtos.settings import (
    AdsAccountRow,
    AlertSettingsResult,
    BillingRecord,
    UserRow,
)
from app.application.dtos.user import UserUpdate
from app.application.interfaces.repositories import IRecordStore
from app.application.interfaces.services import IEmailDispatcher
from app.application.interfaces.storage import IAvatarStorage
from app.domain.collections import (
    COLLECTION_ADS_ACCOUNTS,
    COLLECTION_ALERT_SETTINGS,
    COLLECTION_INVITATIONS,
    COLLECTION_PAYMENT_METHODS,
    COLLECTION_STRIPE_COMPANIES,
    COLLECTION_SUBSCRIPTIONS,
    COLLECTION_USERS,
)
from app.domain.entities.ads_account import has_member, resolve_ads_account_name
from app.domain.entities.alert_settings import (
    ALERT_SETTING_FIELDS,
    DEFAULT_ALERT_SETTINGS,
)
from app.domain.entities.invitation import INVITATION_TTL, InvitationEntity
from app.domain.entities.user import UserDocument
from app.domain.enums import UserRole
from app.domain.exceptions import (
    AdAlertException,
    DuplicateEmailException,
    ValidationException,
)
from app.domain.value_objects.core import DocumentRef
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


def user_ref(user_id: str) -> DocumentRef:
    return DocumentRef(COLLECTION_USERS, user_id)


def connected_accounts_filters(company_admin: DocumentRef) -> list[FieldFilter]:
    """Filters selecting a company's connected ads accounts."""
    return [
        FieldFilter("User", "==", company_admin),
        FieldFilter("Is Connected", "==", True),
    ]


def _refs(values: Any) -> tuple[DocumentRef, ...]:
    return tuple(v for v in values or () if isinstance(v, DocumentRef))


def _to_user_row(record: Record) -> UserRow:
    data = record.data
    return UserRow(
        id=record.id,
        email=data.get("email", ""),
        name=data.get("Name", ""),
        user_type=data.get("User Type", ""),
        user_access=data.get("User Access"),
        avatar=data.get("Avatar"),
        is_google_sign_up=bool(data.get("Is Google Sign Up", False)),
    )


def _to_ads_account_row(record: Record) -> AdsAccountRow:
    data = record.data
    return AdsAccountRow(
        id=record.id,
        name=resolve_ads_account_name(data),
        selected_users=_refs(data.get("Selected Users")),
        currency_symbol=data.get("Currency Symbol"),
        platform=data.get("Platform"),
        monthly_budget=data.get("Monthly Budget"),
        daily_budget=data.get("Daily Budget"),
    )


def user_has_access(account: AdsAccountRow | dict[str, Any], user_id: str) -> bool:
    """True if user_id is referenced in the account's Selected Users."""
    if isinstance(account, AdsAccountRow):
        members: Any = account.selected_users
    else:
        members = account.get("Selected Users")
    return has_member(members, user_ref(user_id))


class SettingsSyncStore:
    """Per-session cache of a company's settings data plus its multi-step mutations."""

    def __init__(
        self,
        records: IRecordStore,
        email: IEmailDispatcher,
        avatars: IAvatarStorage,
        *,
        profile_update_template: str = "",
        invitation_template: str = "",
        app_base_url: str = "",
        invitation_ttl: timedelta = INVITATION_TTL,
    ) -> None:
        self._records = records
        self._email = email
        self._avatars = avatars
        self._profile_update_template = profile_update_template
        self._invitation_template = invitation_template
        self._app_base_url = app_base_url.rstrip("/")
        self._invitation_ttl = invitation_ttl

        self.users: list[UserRow] = []
        self.users_loaded = False
        self.ads_accounts: list[AdsAccountRow] = []
        self.ads_accounts_loaded = False
        self.alert_settings: AlertSettingsResult | None = None
        self.loaded_user_id: str | None = None
        self.subscription: BillingRecord | None = None
        self.subscription_loaded = False
        self.payment_method: BillingRecord | None = None
        self.payment_method_loaded = False
        self.stripe_company: BillingRecord | None = None
        self.stripe_company_loaded = False
        self.loading = False
        self.error: str | None = None

    @asynccontextmanager
    async def _fetching(self, slice_name: str) -> AsyncIterator[None]:
        """Loading/error bookkeeping for a fetch; failures are recorded, not raised."""
        self.loading = True
        self.error = None
        try:
            yield
        except AdAlertException as e:
            logger.warning("Failed to load %s: %s", slice_name, e.message)
            self.error = e.message
        finally:
            self.loading = False

    @asynccontextmanager
    async def _mutating(self, operation: str) -> AsyncIterator[None]:
        """Loading/error bookkeeping for a mutation; failures are recorded and re-raised."""
        self.loading = True
        self.error = None
        try:
            yield
        except AdAlertException as e:
            logger.warning("%s failed: %s", operation, e.message)
            self.error = e.message
            raise
        finally:
            self.loading = False

    # Users

    async def fetch_users(self, company_admin: DocumentRef | str) -> None:
        if self.users_loaded:
            return
        await self.refresh_users(company_admin)

    async def refresh_users(self, company_admin: DocumentRef | str) -> None:
        ref = DocumentRef.coerce(company_admin)
        async with self._fetching("users"):
            records = await self._records.query(
                COLLECTION_USERS, [FieldFilter("Company Admin", "==", ref)]
            )
            self.users = [_to_user_row(r) for r in records]
            self.users_loaded = True

    # Ads accounts

    async def fetch_ads_accounts(self, company_admin: DocumentRef | str) -> None:
        if self.ads_accounts_loaded:
            return
        await self.refresh_ads_accounts(company_admin)

    async def refresh_ads_accounts(self, company_admin: DocumentRef | str) -> None:
        ref = DocumentRef.coerce(company_admin)
        async with self._fetching("ads accounts"):
            records = await self._records.query(
                COLLECTION_ADS_ACCOUNTS, connected_accounts_filters(ref)
            )
            self.ads_accounts = [_to_ads_account_row(r) for r in records]
            self.ads_accounts_loaded = True

    # Alert settings

    async def fetch_alert_settings(self, user_id: str) -> None:
        if self.loaded_user_id == user_id:
            return
        await self.refresh_alert_settings(user_id)

    async def refresh_alert_settings(self, user_id: str) -> None:
        async with self._fetching("alert settings"):
            record = await self._find_alert_settings(user_id)
            self.alert_settings = (
                None
                if record is None
                else AlertSettingsResult(
                    id=record.id,
                    user_id=user_id,
                    toggles={
                        k: bool(record.data[k])
                        for k in ALERT_SETTING_FIELDS
                        if k in record.data
                    },
                )
            )
            self.loaded_user_id = user_id

    async def _find_alert_settings(self, user_id: str) -> Record | None:
        records = await self._records.query(
            COLLECTION_ALERT_SETTINGS, [FieldFilter("User", "==", user_ref(user_id))]
        )
        return records[0] if records else None

    async def update_alert_settings(self, user_id: str, updates: dict[str, bool]) -> None:
        """Update the user's toggles, creating the document if the user has none."""
        unknown = sorted(set(updates) - set(ALERT_SETTING_FIELDS))
        if unknown:
            raise ValidationException(
                f"Unknown alert settings: {', '.join(unknown)}", field=unknown[0]
            )
        if not all(isinstance(v, bool) for v in updates.values()):
            raise ValidationException("Alert settings values must be booleans")
        async with self._mutating("update_alert_settings"):
            existing = await self._find_alert_settings(user_id)
            if existing is not None:
                await self._records.update(existing.ref, dict(updates))
            else:
                await self._records.add(
                    COLLECTION_ALERT_SETTINGS,
                    {"User": user_ref(user_id), **DEFAULT_ALERT_SETTINGS, **updates},
                )
                logger.info("Created alert settings for user %s", user_id)
        await self.refresh_alert_settings(user_id)

    # Billing mirrors

    async def _first_for_company(
        self, collection: str, company_admin: DocumentRef
    ) -> BillingRecord | None:
        records = await self._records.query(
            collection, [FieldFilter("User", "==", company_admin)]
        )
        if not records:
            return None
        return BillingRecord(id=records[0].id, data=records[0].data)

    async def fetch_subscription(self, company_admin: DocumentRef | str) -> None:
        if self.subscription_loaded:
            return
        await self.refresh_subscription(company_admin)

    async def refresh_subscription(self, company_admin: DocumentRef | str) -> None:
        ref = DocumentRef.coerce(company_admin)
        async with self._fetching("subscription"):
            self.subscription = await self._first_for_company(COLLECTION_SUBSCRIPTIONS, ref)
            self.subscription_loaded = True

    async def fetch_payment_method(self, company_admin: DocumentRef | str) -> None:
        if self.payment_method_loaded:
            return
        await self.refresh_payment_method(company_admin)

    async def refresh_payment_method(self, company_admin: DocumentRef | str) -> None:
        ref = DocumentRef.coerce(company_admin)
        async with self._fetching("payment method"):
            self.payment_method = await self._first_for_company(
                COLLECTION_PAYMENT_METHODS, ref
            )
            self.payment_method_loaded = True

    async def fetch_stripe_company(self, company_admin: DocumentRef | str) -> None:
        if self.stripe_company_loaded:
            return
        await self.refresh_stripe_company(company_admin)

    async def refresh_stripe_company(self, company_admin: DocumentRef | str) -> None:
        ref = DocumentRef.coerce(company_admin)
        async with self._fetching("stripe company"):
            self.stripe_company = await self._first_for_company(
                COLLECTION_STRIPE_COMPANIES, ref
            )
            self.stripe_company_loaded = True

    def invalidate_billing(self) -> None:
        """Drop the billing slices so the next fetch reloads them."""
        self.subscription_loaded = False
        self.payment_method_loaded = False
        self.stripe_company_loaded = False

    # Mutations

    async def update_user(
        self,
        user_id: str,
        update: UserUpdate,
        *,
        company_admin: DocumentRef | str,
        notify: bool = False,
        target_user: UserRow | None = None,
        ads_account_ids: list[str] | None = None,
    ) -> None:
        """Apply a profile edit in order: avatar, fields, membership, email, refresh.

        Any failing step aborts the rest; earlier steps stay written. The old
        avatar is removed best-effort after a new one is stored.
        """
        company = DocumentRef.coerce(company_admin)
        if update.role is not None and update.role not in UserRole.values():
            raise ValidationException(f"Unknown user type: {update.role!r}", field="User Type")
        async with self._mutating("update_user"):
            fields: dict[str, Any] = update.fields()
            if update.avatar is not None:
                url = await self._avatars.upload_avatar(
                    user_id, update.avatar.content, update.avatar.content_type
                )
                fields["Avatar"] = url
                if update.current_avatar_url and update.current_avatar_url != url:
                    await self._delete_old_avatar(update.current_avatar_url)

            if fields:
                await self._records.update(user_ref(user_id), fields)
                logger.info("Updated user %s fields: %s", user_id, sorted(fields))

            if update.role is not None and ads_account_ids is not None:
                await self.reconcile_ads_account_membership(
                    user_id, UserRole(update.role), ads_account_ids, company
                )

            if notify and target_user is not None:
                await self._email.send(
                    to=target_user.email,
                    template_id=self._profile_update_template,
                    name=update.name or target_user.name,
                    variables={
                        "name": update.name or target_user.name,
                        "role": update.role or target_user.user_type,
                        "loginLink": f"{self._app_base_url}/login",
                    },
                )

        await self.refresh_users(company)

    async def _delete_old_avatar(self, url: str) -> None:
        try:
            await self._avatars.delete_by_url(url)
        except Exception as e:
            logger.warning("Could not delete previous avatar %s: %s", url, e)

    async def reconcile_ads_account_membership(
        self,
        user_id: str,
        role: UserRole,
        target_ids: list[str] | set[str],
        company_admin: DocumentRef | str,
    ) -> list[str]:
        """Align Selected Users on every connected account with the user's role.

        Admins are added everywhere and never removed. Managers are added to
        the target accounts and removed from the others. Only accounts whose
        membership changes are written; returns their ids.
        """
        company = DocumentRef.coerce(company_admin)
        member = user_ref(user_id)
        targets = set(target_ids)
        accounts = await self._records.query(
            COLLECTION_ADS_ACCOUNTS, connected_accounts_filters(company)
        )

        changes: dict[DocumentRef, list[Any]] = {}
        for account in accounts:
            current = list(account.get("Selected Users") or [])
            present = has_member(current, member)
            wanted = role == UserRole.ADMIN or account.id in targets
            if wanted and not present:
                changes[account.ref] = [*current, member]
            elif not wanted and present:
                changes[account.ref] = [ref for ref in current if ref != member]

        await asyncio.gather(
            *(
                self._records.update(ref, {"Selected Users": members})
                for ref, members in changes.items()
            )
        )
        if changes:
            self.ads_accounts_loaded = False
            logger.info(
                "Reconciled ads account membership for user %s (%s): %d account(s) changed",
                user_id,
                role.value,
                len(changes),
            )
        return [ref.id for ref in changes]

    async def invite_user(
        self,
        email: str,
        role: UserRole,
        name: str,
        ads_account_ids: list[str],
        inviter: UserDocument,
    ) -> tuple[str, InvitationEntity]:
        """Create an invitation and email the accept link.

        A user with the same (lower-cased) email already existing is reported
        as DuplicateEmailException before anything is written. Admin invites
        get every connected ads account.
        """
        normalized = (email or "").strip().lower()
        existing = await self._records.query(
            COLLECTION_USERS, [FieldFilter("email", "==", normalized)]
        )
        if existing:
            raise DuplicateEmailException(normalized)

        async with self._mutating("invite_user"):
            if role == UserRole.ADMIN:
                accounts = await self._records.query(
                    COLLECTION_ADS_ACCOUNTS,
                    connected_accounts_filters(inviter.company_admin),
                )
                ads_account_ids = [a.id for a in accounts]
            invitation = InvitationEntity(
                email=normalized,
                name=name,
                role=role,
                ads_accounts=[
                    DocumentRef(COLLECTION_ADS_ACCOUNTS, i) for i in ads_account_ids
                ],
                invited_by=inviter.ref,
                company_admin=inviter.company_admin,
                created_at=utc_now(),
                ttl=self._invitation_ttl,
            )
            ref = await self._records.add(COLLECTION_INVITATIONS, invitation.to_document())
            logger.info("Created invitation %s (%s)", ref.id, role.value)
            await self._email.send(
                to=invitation.email,
                template_id=self._invitation_template,
                name=name,
                variables={
                    "name": name,
                    "inviterName": inviter.name,
                    "role": role.value,
                    "inviteLink": f"{self._app_base_url}/invite/{ref.id}",
                },
            )
        return ref.id, invitation
