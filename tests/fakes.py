"""In-memory collaborators for service and API tests."""

from __future__ import annotations

import itertools
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from app.application.dtos.billing import (
    BillingAddress,
    CustomerResult,
    InvoiceResult,
    PaymentMethodResult,
    SubscriptionResult,
)
from app.application.dtos.record import FieldFilter, Record
from app.domain.exceptions import PaymentException
from app.domain.value_objects.core import DocumentRef
from app.infrastructure.exceptions import EmailDispatchError, RecordStoreError


def _matches(data: dict[str, Any], flt: FieldFilter) -> bool:
    if flt.field not in data:
        return False
    value = data[flt.field]
    if flt.op == "==":
        return value == flt.value
    return isinstance(value, list) and flt.value in value


class InMemoryRecordStore:
    """Record store over nested dicts; counts queries and can fail on demand.

    fail_on maps an operation name ("query", "get", "update", "set", "add",
    "delete") to the collection it should fail for ("*" for any).
    fail_after_deletes makes every delete after the first N fail.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.queries: list[tuple[str, tuple[FieldFilter, ...]]] = []
        self.updates: list[tuple[DocumentRef, dict[str, Any]]] = []
        self.deleted: list[DocumentRef] = []
        self.fail_on: dict[str, str] = {}
        self.fail_after_deletes: int | None = None
        self._ids = itertools.count(1)

    # Test helpers

    def seed(self, collection: str, doc_id: str, data: dict[str, Any]) -> DocumentRef:
        self.collections[collection][doc_id] = dict(data)
        return DocumentRef(collection, doc_id)

    def doc(self, ref: DocumentRef) -> dict[str, Any] | None:
        return self.collections[ref.collection].get(ref.id)

    def docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self.collections[collection]

    def _maybe_fail(self, operation: str, collection: str, target: str) -> None:
        wanted = self.fail_on.get(operation)
        if wanted is not None and wanted in ("*", collection):
            raise RecordStoreError(operation, target, "injected failure")

    # IRecordStore

    def ref(self, collection: str, doc_id: str) -> DocumentRef:
        return DocumentRef(collection, doc_id)

    async def query(self, collection: str, filters: list[FieldFilter]) -> list[Record]:
        self.queries.append((collection, tuple(filters)))
        self._maybe_fail("query", collection, collection)
        return [
            Record(DocumentRef(collection, doc_id), dict(data))
            for doc_id, data in self.collections[collection].items()
            if all(_matches(data, f) for f in filters)
        ]

    async def get(self, ref: DocumentRef) -> Record | None:
        self._maybe_fail("get", ref.collection, ref.path)
        data = self.doc(ref)
        return None if data is None else Record(ref, dict(data))

    async def update(self, ref: DocumentRef, fields: dict[str, Any]) -> None:
        self._maybe_fail("update", ref.collection, ref.path)
        data = self.doc(ref)
        if data is None:
            raise RecordStoreError("update", ref.path, "document not found")
        data.update(fields)
        self.updates.append((ref, dict(fields)))

    async def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        self._maybe_fail("set", ref.collection, ref.path)
        self.collections[ref.collection][ref.id] = dict(data)

    async def add(self, collection: str, data: dict[str, Any]) -> DocumentRef:
        self._maybe_fail("add", collection, collection)
        doc_id = f"{collection}-{next(self._ids)}"
        self.collections[collection][doc_id] = dict(data)
        return DocumentRef(collection, doc_id)

    async def delete(self, ref: DocumentRef) -> None:
        self._maybe_fail("delete", ref.collection, ref.path)
        if self.fail_after_deletes is not None and len(self.deleted) >= self.fail_after_deletes:
            raise RecordStoreError("delete", ref.path, "injected failure")
        self.collections[ref.collection].pop(ref.id, None)
        self.deleted.append(ref)


class FakeEmailDispatcher:
    def __init__(self, fail: bool = False) -> None:
        self.sent: list[dict[str, Any]] = []
        self.fail = fail

    async def send(
        self,
        to: str,
        template_id: str,
        name: str,
        variables: dict[str, Any] | None = None,
    ) -> None:
        if self.fail:
            raise EmailDispatchError(to, "injected failure")
        self.sent.append(
            {"to": to, "template_id": template_id, "name": name, "variables": variables or {}}
        )


class FakeAvatarStorage:
    def __init__(self, delete_error: Exception | None = None) -> None:
        self.uploaded: list[tuple[str, bytes, str]] = []
        self.deleted: list[str] = []
        self.delete_error = delete_error

    async def upload_avatar(self, user_id: str, content: bytes, content_type: str) -> str:
        self.uploaded.append((user_id, content, content_type))
        return f"https://cdn.test/avatars/{user_id}/{len(self.uploaded)}.png"

    async def delete_by_url(self, url: str) -> bool:
        if self.delete_error is not None:
            raise self.delete_error
        self.deleted.append(url)
        return True


class FakeCountryNameResolver:
    NAMES = {"US": "United States", "DE": "Germany", "GB": "United Kingdom"}

    def __init__(self) -> None:
        self.resolved: list[str] = []

    async def resolve(self, code: str) -> str:
        self.resolved.append(code)
        return self.NAMES.get(code.upper(), code)


class FakePaymentGateway:
    """Records calls in order; subscription status and card decline are configurable."""

    def __init__(
        self,
        subscription_status: str = "active",
        decline_card: bool = False,
        failure_message: str | None = None,
    ) -> None:
        self.subscription_status = subscription_status
        self.decline_card = decline_card
        self.failure_message = failure_message
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._ids = itertools.count(1)

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def create_payment_method(
        self,
        card_token: str,
        name: str,
        email: str,
        address: BillingAddress,
        phone: str | None = None,
    ) -> PaymentMethodResult:
        self.calls.append(("create_payment_method", {"card_token": card_token}))
        if self.decline_card:
            raise PaymentException("Your card was declined.", step="create_payment_method")
        return PaymentMethodResult(
            id=f"pm_{next(self._ids)}", brand="visa", last4="4242", exp_month=12, exp_year=2030
        )

    async def create_customer(
        self,
        email: str,
        name: str,
        payment_method_id: str,
        address: BillingAddress,
        metadata: dict[str, str] | None = None,
    ) -> CustomerResult:
        self.calls.append(
            ("create_customer", {"email": email, "name": name, "payment_method_id": payment_method_id})
        )
        return CustomerResult(id=f"cus_{next(self._ids)}", email=email, name=name)

    async def create_subscription(
        self,
        customer_id: str,
        price_id: str,
        quantity: int,
        payment_method_id: str | None = None,
    ) -> SubscriptionResult:
        self.calls.append(
            (
                "create_subscription",
                {"customer_id": customer_id, "price_id": price_id, "quantity": quantity},
            )
        )
        return SubscriptionResult(
            id=f"sub_{next(self._ids)}",
            status=self.subscription_status,
            quantity=quantity,
            failure_message=self.failure_message,
        )

    async def list_invoices(self, customer_id: str, limit: int = 10) -> list[InvoiceResult]:
        self.calls.append(("list_invoices", {"customer_id": customer_id, "limit": limit}))
        return [
            InvoiceResult(
                id="in_1",
                status="paid",
                amount_due=5900,
                amount_paid=5900,
                currency="usd",
                created=datetime(2026, 1, 1, tzinfo=timezone.utc),
            )
        ]


ADMIN_ID = "admin-1"
MANAGER_ID = "manager-1"


def seed_company(records: InMemoryRecordStore) -> dict[str, DocumentRef]:
    """Company of one admin (the owner) and one manager with three ads accounts.

    acc-1 and acc-2 are connected; acc-3 is not. The manager is a member of
    acc-1 only; the admin is a member of both connected accounts.
    """
    admin = DocumentRef("users", ADMIN_ID)
    manager = DocumentRef("users", MANAGER_ID)
    records.seed(
        "users",
        ADMIN_ID,
        {
            "email": "owner@acme.test",
            "Name": "Olive Owner",
            "User Type": "Admin",
            "Company Admin": admin,
        },
    )
    records.seed(
        "users",
        MANAGER_ID,
        {
            "email": "max@acme.test",
            "Name": "Max Manager",
            "User Type": "Manager",
            "Company Admin": admin,
            "Avatar": "https://cdn.test/avatars/old.png",
        },
    )
    acc1 = records.seed(
        "adsAccounts",
        "acc-1",
        {
            "User": admin,
            "Is Connected": True,
            "Account Name Editable": "Acme Search",
            "Selected Users": [admin, manager],
        },
    )
    acc2 = records.seed(
        "adsAccounts",
        "acc-2",
        {
            "User": admin,
            "Is Connected": True,
            "Account Name Original": "Acme Display",
            "Selected Users": [admin],
        },
    )
    acc3 = records.seed(
        "adsAccounts",
        "acc-3",
        {"User": admin, "Is Connected": False, "Id": "1234567890", "Selected Users": []},
    )
    return {"admin": admin, "manager": manager, "acc1": acc1, "acc2": acc2, "acc3": acc3}
