"""Tests for SettingsSyncStore: cached slices, alert settings, user edits, membership, invites."""

from datetime import timedelta

import pytest

from app.application.dtos.settings import UserRow
from app.application.dtos.user import AvatarUpload, UserUpdate
from app.application.services.settings_sync import SettingsSyncStore, user_has_access
from app.domain.entities.alert_settings import DEFAULT_ALERT_SETTINGS
from app.domain.entities.user import UserDocument
from app.domain.enums import UserRole
from app.domain.exceptions import DuplicateEmailException, ValidationException
from app.domain.value_objects.core import DocumentRef
from app.infrastructure.exceptions import (
    EmailDispatchError,
    RecordStoreError,
    StorageDeleteError,
)
from tests.fakes import (
    ADMIN_ID,
    MANAGER_ID,
    FakeAvatarStorage,
    FakeEmailDispatcher,
    InMemoryRecordStore,
)


def _members(records: InMemoryRecordStore, account_id: str) -> list[DocumentRef]:
    return records.doc(DocumentRef("adsAccounts", account_id))["Selected Users"]


def _admin(records: InMemoryRecordStore) -> UserDocument:
    ref = DocumentRef("users", ADMIN_ID)
    return UserDocument.from_document(ADMIN_ID, records.doc(ref))


class TestFetchGuards:
    async def test_fetch_users_queries_once(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.fetch_users(company["admin"])
        await settings_store.fetch_users(company["admin"])
        user_queries = [q for q in records.queries if q[0] == "users"]
        assert len(user_queries) == 1
        assert {u.id for u in settings_store.users} == {ADMIN_ID, MANAGER_ID}
        assert settings_store.users_loaded

    async def test_refresh_users_always_queries(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.fetch_users(company["admin"])
        await settings_store.refresh_users(company["admin"])
        assert len([q for q in records.queries if q[0] == "users"]) == 2

    async def test_company_admin_path_string_accepted(
        self, settings_store: SettingsSyncStore, company: dict
    ) -> None:
        await settings_store.fetch_users(f"users/{ADMIN_ID}")
        assert len(settings_store.users) == 2

    async def test_fetch_ads_accounts_connected_only_with_names(
        self, settings_store: SettingsSyncStore, company: dict
    ) -> None:
        await settings_store.fetch_ads_accounts(company["admin"])
        names = {a.id: a.name for a in settings_store.ads_accounts}
        assert names == {"acc-1": "Acme Search", "acc-2": "Acme Display"}

    async def test_fetch_failure_is_recorded_not_raised(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.fail_on["query"] = "users"
        await settings_store.fetch_users(company["admin"])
        assert not settings_store.users_loaded
        assert settings_store.error is not None
        assert settings_store.loading is False

        records.fail_on.clear()
        await settings_store.fetch_users(company["admin"])
        assert settings_store.users_loaded
        assert settings_store.error is None

    async def test_alert_settings_guard_is_per_user(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.seed(
            "alertSettings",
            "as-1",
            {"User": company["admin"], **DEFAULT_ALERT_SETTINGS},
        )
        await settings_store.fetch_alert_settings(ADMIN_ID)
        await settings_store.fetch_alert_settings(ADMIN_ID)
        assert len([q for q in records.queries if q[0] == "alertSettings"]) == 1
        assert settings_store.alert_settings.id == "as-1"

        await settings_store.fetch_alert_settings(MANAGER_ID)
        assert len([q for q in records.queries if q[0] == "alertSettings"]) == 2
        assert settings_store.alert_settings is None
        assert settings_store.loaded_user_id == MANAGER_ID

    async def test_billing_slices_and_invalidate(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.seed("subscriptions", "s1", {"User": company["admin"], "Status": "Paying"})
        await settings_store.fetch_subscription(company["admin"])
        await settings_store.fetch_payment_method(company["admin"])
        await settings_store.fetch_stripe_company(company["admin"])
        assert settings_store.subscription.data["Status"] == "Paying"
        assert settings_store.payment_method is None
        assert settings_store.stripe_company_loaded

        settings_store.invalidate_billing()
        await settings_store.fetch_subscription(company["admin"])
        assert len([q for q in records.queries if q[0] == "subscriptions"]) == 2


class TestAlertSettingsUpdate:
    async def test_updates_existing_document(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.seed("alertSettings", "as-1", {"User": company["admin"], **DEFAULT_ALERT_SETTINGS})
        await settings_store.update_alert_settings(ADMIN_ID, {"Severity Low": False})
        assert records.doc(DocumentRef("alertSettings", "as-1"))["Severity Low"] is False
        assert settings_store.alert_settings.toggles["Severity Low"] is False

    async def test_creates_document_with_defaults_when_missing(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.update_alert_settings(MANAGER_ID, {"Send SMS Alerts": True})
        docs = list(records.docs("alertSettings").values())
        assert len(docs) == 1
        assert docs[0]["User"] == company["manager"]
        assert docs[0]["Send SMS Alerts"] is True
        assert docs[0]["Type Budget"] is True

    async def test_unknown_toggle_rejected_before_writing(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        with pytest.raises(ValidationException):
            await settings_store.update_alert_settings(ADMIN_ID, {"Level Galaxy": True})
        assert records.docs("alertSettings") == {}

    async def test_failure_recorded_and_raised(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.fail_on["add"] = "alertSettings"
        with pytest.raises(RecordStoreError):
            await settings_store.update_alert_settings(ADMIN_ID, {"Level Ads": False})
        assert settings_store.error is not None


class TestReconcileMembership:
    async def test_manager_added_and_removed(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        changed = await settings_store.reconcile_ads_account_membership(
            MANAGER_ID, UserRole.MANAGER, ["acc-2"], company["admin"]
        )
        assert sorted(changed) == ["acc-1", "acc-2"]
        assert company["manager"] not in _members(records, "acc-1")
        assert company["manager"] in _members(records, "acc-2")
        # Other members untouched
        assert company["admin"] in _members(records, "acc-1")

    async def test_idempotent(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.reconcile_ads_account_membership(
            MANAGER_ID, UserRole.MANAGER, ["acc-2"], company["admin"]
        )
        writes = len(records.updates)
        changed = await settings_store.reconcile_ads_account_membership(
            MANAGER_ID, UserRole.MANAGER, ["acc-2"], company["admin"]
        )
        assert changed == []
        assert len(records.updates) == writes

    async def test_admin_added_everywhere_and_never_removed(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.reconcile_ads_account_membership(
            MANAGER_ID, UserRole.ADMIN, [], company["admin"]
        )
        assert company["manager"] in _members(records, "acc-1")
        assert company["manager"] in _members(records, "acc-2")
        # Disconnected accounts are not touched
        assert _members(records, "acc-3") == []

    async def test_no_duplicate_entries(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        await settings_store.reconcile_ads_account_membership(
            ADMIN_ID, UserRole.ADMIN, [], company["admin"]
        )
        assert _members(records, "acc-1").count(company["admin"]) == 1

    async def test_change_invalidates_ads_accounts_slice(
        self, settings_store: SettingsSyncStore, company: dict
    ) -> None:
        await settings_store.fetch_ads_accounts(company["admin"])
        await settings_store.reconcile_ads_account_membership(
            MANAGER_ID, UserRole.MANAGER, [], company["admin"]
        )
        assert not settings_store.ads_accounts_loaded

    def test_user_has_access(self) -> None:
        account = {"Selected Users": [DocumentRef("users", "u10")]}
        assert not user_has_access(account, "u1")
        assert user_has_access(account, "u10")


class TestUpdateUser:
    async def test_name_role_membership_and_email(
        self,
        settings_store: SettingsSyncStore,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
    ) -> None:
        target = UserRow(id=MANAGER_ID, email="max@acme.test", name="Max Manager", user_type="Manager")
        await settings_store.update_user(
            MANAGER_ID,
            UserUpdate(name="Max M.", role="Manager"),
            company_admin=company["admin"],
            notify=True,
            target_user=target,
            ads_account_ids=["acc-2"],
        )
        doc = records.doc(company["manager"])
        assert doc["Name"] == "Max M."
        assert company["manager"] in _members(records, "acc-2")
        assert company["manager"] not in _members(records, "acc-1")
        assert email.sent == [
            {
                "to": "max@acme.test",
                "template_id": "tpl-profile",
                "name": "Max M.",
                "variables": {
                    "name": "Max M.",
                    "role": "Manager",
                    "loginLink": "https://app.test/login",
                },
            }
        ]
        assert settings_store.users_loaded

    async def test_avatar_replaced_and_old_one_deleted(
        self,
        settings_store: SettingsSyncStore,
        records: InMemoryRecordStore,
        avatars: FakeAvatarStorage,
        company: dict,
    ) -> None:
        await settings_store.update_user(
            MANAGER_ID,
            UserUpdate(
                avatar=AvatarUpload(content=b"png", content_type="image/png"),
                current_avatar_url="https://cdn.test/avatars/old.png",
            ),
            company_admin=company["admin"],
        )
        assert avatars.uploaded == [(MANAGER_ID, b"png", "image/png")]
        assert records.doc(company["manager"])["Avatar"].startswith("https://cdn.test/avatars/manager-1/")
        assert avatars.deleted == ["https://cdn.test/avatars/old.png"]

    @pytest.mark.parametrize(
        "error",
        [
            StorageDeleteError("avatars/old.png", "access denied"),
            ConnectionError("connection reset by peer"),
        ],
    )
    async def test_old_avatar_delete_failure_is_ignored(
        self,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
        error: Exception,
    ) -> None:
        store = SettingsSyncStore(records, email, FakeAvatarStorage(delete_error=error))
        await store.update_user(
            MANAGER_ID,
            UserUpdate(
                avatar=AvatarUpload(content=b"png", content_type="image/png"),
                current_avatar_url="https://cdn.test/avatars/old.png",
            ),
            company_admin=company["admin"],
        )
        assert records.doc(company["manager"])["Avatar"].startswith("https://cdn.test/avatars/manager-1/")
        assert store.error is None

    async def test_unknown_role_rejected_before_writing(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        with pytest.raises(ValidationException):
            await settings_store.update_user(
                MANAGER_ID, UserUpdate(role="Owner"), company_admin=company["admin"]
            )
        assert records.updates == []

    async def test_email_failure_propagates_after_writes(
        self, records: InMemoryRecordStore, avatars: FakeAvatarStorage, company: dict
    ) -> None:
        store = SettingsSyncStore(records, FakeEmailDispatcher(fail=True), avatars)
        target = UserRow(id=MANAGER_ID, email="max@acme.test", name="Max", user_type="Manager")
        with pytest.raises(EmailDispatchError):
            await store.update_user(
                MANAGER_ID,
                UserUpdate(name="Changed"),
                company_admin=company["admin"],
                notify=True,
                target_user=target,
            )
        assert records.doc(company["manager"])["Name"] == "Changed"
        assert store.error is not None


class TestInviteUser:
    async def test_manager_invite(
        self,
        settings_store: SettingsSyncStore,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
    ) -> None:
        invitation_id, invitation = await settings_store.invite_user(
            "New@Acme.test", UserRole.MANAGER, "New Person", ["acc-2"], _admin(records)
        )
        doc = records.doc(DocumentRef("invitations", invitation_id))
        assert doc["email"] == "new@acme.test"
        assert doc["Ads Accounts"] == [company["acc2"]]
        assert doc["Company Admin"] == company["admin"]
        assert invitation.expires_at - invitation.created_at == timedelta(days=7)
        sent = email.sent[0]
        assert sent["template_id"] == "tpl-invite"
        assert sent["variables"]["inviteLink"] == f"https://app.test/invite/{invitation_id}"
        assert sent["variables"]["inviterName"] == "Olive Owner"

    async def test_admin_invite_gets_all_connected_accounts(
        self, settings_store: SettingsSyncStore, records: InMemoryRecordStore, company: dict
    ) -> None:
        invitation_id, _ = await settings_store.invite_user(
            "boss@acme.test", UserRole.ADMIN, "Boss", [], _admin(records)
        )
        doc = records.doc(DocumentRef("invitations", invitation_id))
        assert sorted(r.id for r in doc["Ads Accounts"]) == ["acc-1", "acc-2"]

    async def test_duplicate_email_rejected_without_writing(
        self,
        settings_store: SettingsSyncStore,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
    ) -> None:
        with pytest.raises(DuplicateEmailException):
            await settings_store.invite_user(
                "MAX@acme.test", UserRole.MANAGER, "Max", [], _admin(records)
            )
        assert records.docs("invitations") == {}
        assert email.sent == []
