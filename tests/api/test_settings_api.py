"""API tests for /settings: users, invitations, ads accounts, alert settings."""

from typing import Any

from httpx import AsyncClient

from tests.fakes import MANAGER_ID, FakeAvatarStorage, FakeEmailDispatcher, InMemoryRecordStore


def _members(records: InMemoryRecordStore, account_id: str) -> set[str]:
    return {ref.id for ref in records.docs("adsAccounts")[account_id]["Selected Users"]}


class TestUsers:
    async def test_list_company_users(self, client: AsyncClient, company: dict) -> None:
        response = await client.get("/api/v1/settings/users")
        assert response.status_code == 200
        body = response.json()
        assert body["loaded"] is True
        assert {u["id"] for u in body["items"]} == {"admin-1", "manager-1"}

    async def test_load_failure_is_502(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.fail_on["query"] = "users"
        response = await client.get("/api/v1/settings/users", headers={"X-Request-ID": "req-42"})
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "UPSTREAM_ERROR"
        assert body["request_id"] == "req-42"

    async def test_failed_refresh_after_load_is_502(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        assert (await client.get("/api/v1/settings/users")).status_code == 200

        records.fail_on["query"] = "users"
        response = await client.get("/api/v1/settings/users", params={"refresh": "true"})
        assert response.status_code == 502
        body = response.json()
        assert body["error"] == "UPSTREAM_ERROR"
        assert body["message"] == "Record store query failed for users"

        # The slice stays loaded; a plain read serves the cached rows again.
        records.fail_on.clear()
        response = await client.get("/api/v1/settings/users")
        assert response.status_code == 200
        assert {u["id"] for u in response.json()["items"]} == {"admin-1", "manager-1"}

    async def test_admin_edits_manager(
        self,
        client: AsyncClient,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
    ) -> None:
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}",
            data={"name": "Max M.", "ads_account_ids": ["acc-2"], "notify": "true"},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Max M."
        assert _members(records, "acc-1") == {"admin-1"}
        assert _members(records, "acc-2") == {"admin-1", "manager-1"}
        assert email.sent[0]["to"] == "max@acme.test"
        assert email.sent[0]["variables"]["role"] == "Manager"

    async def test_promote_to_admin_joins_every_account(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}",
            data={"role": "Admin"},
        )
        assert response.status_code == 200
        assert response.json()["user_type"] == "Admin"
        assert "manager-1" in _members(records, "acc-2")

    async def test_owner_cannot_be_demoted(self, client: AsyncClient, company: dict) -> None:
        response = await client.patch(
            "/api/v1/settings/users/admin-1", data={"role": "Manager"}
        )
        assert response.status_code == 400

    async def test_manager_edits_own_name_and_avatar(
        self,
        client: AsyncClient,
        records: InMemoryRecordStore,
        avatars: FakeAvatarStorage,
        company: dict,
        token_claims: dict[str, Any],
    ) -> None:
        token_claims["sub"] = MANAGER_ID
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}",
            data={"name": "Maxine"},
            files={"avatar": ("me.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 200
        doc = records.docs("users")[MANAGER_ID]
        assert doc["Name"] == "Maxine"
        assert doc["Avatar"].startswith("https://cdn.test/avatars/manager-1/")
        assert avatars.deleted == ["https://cdn.test/avatars/old.png"]

    async def test_manager_cannot_edit_others_or_roles(
        self, client: AsyncClient, company: dict, token_claims: dict[str, Any]
    ) -> None:
        token_claims["sub"] = MANAGER_ID
        response = await client.patch("/api/v1/settings/users/admin-1", data={"name": "X"})
        assert response.status_code == 403
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}", data={"ads_account_ids": ["acc-2"]}
        )
        assert response.status_code == 403

    async def test_google_avatar_only_changed_by_owner(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.docs("users")[MANAGER_ID]["Is Google Sign Up"] = True
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}",
            files={"avatar": ("a.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 403
        assert records.updates == []

    async def test_unsupported_avatar_type(self, client: AsyncClient, company: dict) -> None:
        response = await client.patch(
            f"/api/v1/settings/users/{MANAGER_ID}",
            files={"avatar": ("a.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400

    async def test_user_of_other_company_is_404(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.seed("users", "outsider", {"email": "o@x.test", "User Type": "Admin"})
        response = await client.patch("/api/v1/settings/users/outsider", data={"name": "X"})
        assert response.status_code == 404


class TestInvitations:
    async def test_invite_manager(
        self,
        client: AsyncClient,
        records: InMemoryRecordStore,
        email: FakeEmailDispatcher,
        company: dict,
    ) -> None:
        response = await client.post(
            "/api/v1/settings/users/invitations",
            json={
                "email": "New@Example.com",
                "name": "New Person",
                "role": "Manager",
                "ads_account_ids": ["acc-1"],
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "new@example.com"
        assert body["ads_account_ids"] == ["acc-1"]
        assert body["status"] == "Pending"
        assert body["id"] in records.docs("invitations")
        assert email.sent[0]["variables"]["inviteLink"].endswith(f"/invite/{body['id']}")

    async def test_existing_email_is_409(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        records.seed(
            "users",
            "teammate",
            {
                "email": "sam@example.com",
                "Name": "Sam",
                "User Type": "Manager",
                "Company Admin": company["admin"],
            },
        )
        response = await client.post(
            "/api/v1/settings/users/invitations",
            json={"email": "Sam@Example.com", "name": "Sam", "role": "Manager"},
        )
        assert response.status_code == 409
        assert response.json()["error"] == "DUPLICATE_EMAIL"
        assert records.docs("invitations") == {}

    async def test_managers_cannot_invite(
        self, client: AsyncClient, company: dict, token_claims: dict[str, Any]
    ) -> None:
        token_claims["sub"] = MANAGER_ID
        response = await client.post(
            "/api/v1/settings/users/invitations",
            json={"email": "z@example.com", "name": "Z", "role": "Manager"},
        )
        assert response.status_code == 403


class TestAdsAccountsAndAlertSettings:
    async def test_connected_accounts_listed(self, client: AsyncClient, company: dict) -> None:
        response = await client.get("/api/v1/settings/ads-accounts")
        assert response.status_code == 200
        items = {a["id"]: a for a in response.json()["items"]}
        assert set(items) == {"acc-1", "acc-2"}
        assert items["acc-1"]["name"] == "Acme Search"
        assert sorted(items["acc-1"]["selected_user_ids"]) == ["admin-1", "manager-1"]

    async def test_alert_settings_created_on_first_update(
        self, client: AsyncClient, records: InMemoryRecordStore, company: dict
    ) -> None:
        response = await client.get("/api/v1/settings/alert-settings")
        assert response.status_code == 200
        assert response.json()["id"] is None

        response = await client.patch(
            "/api/v1/settings/alert-settings", json={"toggles": {"Send SMS Alerts": True}}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["id"] in records.docs("alertSettings")
        assert body["toggles"]["Send SMS Alerts"] is True
        assert body["toggles"]["Type Budget"] is True

    async def test_unknown_toggle_is_400(self, client: AsyncClient, company: dict) -> None:
        response = await client.patch(
            "/api/v1/settings/alert-settings", json={"toggles": {"Level Galaxy": True}}
        )
        assert response.status_code == 400
