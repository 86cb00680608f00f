"""Subscription payment provisioning: payment method, customer, subscription, invoices."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from app.application.dtos.billing import (
    BillingForm,
    InvoiceResult,
    ProvisioningResult,
)
from app.application.dtos.record import FieldFilter, Record
from app.application.interfaces.repositories import IRecordStore
from app.application.interfaces.services import ICountryNameResolver, IPaymentGateway
from app.application.services.settings_sync import connected_accounts_filters
from app.domain.collections import (
    COLLECTION_ADS_ACCOUNTS,
    COLLECTION_PAYMENT_METHODS,
    COLLECTION_STRIPE_COMPANIES,
    COLLECTION_SUBSCRIPTIONS,
)
from app.domain.entities.subscription import calculate_subscription_price
from app.domain.enums import SubscriptionStatus
from app.domain.exceptions import PaymentException, ResourceNotFoundException
from app.domain.value_objects.core import DocumentRef
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_event, traced
from app.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class SubscriptionProvisioningService:
    """Runs the billing sequence for a company.

    Each provider call happens at most once per run and the first failure
    stops the run. Nothing is undone on failure: a customer created before a
    declined subscription stays, and running again creates a new one only if
    no customer id was recorded.
    """

    def __init__(
        self,
        records: IRecordStore,
        gateway: IPaymentGateway,
        countries: ICountryNameResolver,
        *,
        price_id: str,
        first_account_price: Decimal,
        additional_account_price: Decimal,
        invoices_limit: int = 10,
    ) -> None:
        self._records = records
        self._gateway = gateway
        self._countries = countries
        self._price_id = price_id
        self._first_price = first_account_price
        self._additional_price = additional_account_price
        self._invoices_limit = invoices_limit

    async def _first(self, collection: str, company: DocumentRef) -> Record | None:
        records = await self._records.query(collection, [FieldFilter("User", "==", company)])
        return records[0] if records else None

    async def connected_count(self, company_admin: DocumentRef | str) -> int:
        company = DocumentRef.coerce(company_admin)
        accounts = await self._records.query(
            COLLECTION_ADS_ACCOUNTS, connected_accounts_filters(company)
        )
        return len(accounts)

    async def quote(self, company_admin: DocumentRef | str) -> tuple[int, Decimal]:
        """Return (connected ads account count, monthly price)."""
        count = await self.connected_count(company_admin)
        return count, self.price_for(count)

    def price_for(self, count: int) -> Decimal:
        return calculate_subscription_price(count, self._first_price, self._additional_price)

    @traced("billing.provision_subscription", record_args=())
    async def provision(self, form: BillingForm) -> ProvisioningResult:
        """Set up billing for the company named by form.company_admin.

        Raises:
            ResourceNotFoundException: The company admin user does not exist.
            PaymentException: The provider declined the card or the first payment.
        """
        company = DocumentRef.coerce(form.company_admin)
        if await self._records.get(company) is None:
            raise ResourceNotFoundException("user", company.id)

        mirror = await self._first(COLLECTION_STRIPE_COMPANIES, company)
        subscription_doc = await self._first(COLLECTION_SUBSCRIPTIONS, company)
        payment_method_doc = await self._first(COLLECTION_PAYMENT_METHODS, company)
        count = await self.connected_count(company)

        customer_id = _customer_id(subscription_doc, payment_method_doc, mirror)
        if payment_method_doc is None:
            payment_method_id, customer_id = await self._set_up_payment(
                form, company, mirror, customer_id
            )
            subscription_doc = await self._record_customer(
                company, subscription_doc, customer_id
            )
        else:
            payment_method_id = payment_method_doc.get("Payment Method Id")

        result = ProvisioningResult(
            company_admin_id=company.id,
            connected_count=count,
            monthly_price=self.price_for(count),
            customer_id=customer_id,
            payment_method_id=payment_method_id,
        )
        if count <= 0:
            logger.info("Company %s has no connected ads accounts; no subscription created", company.id)
            return result
        if not customer_id:
            raise PaymentException("No billing customer on file", step="create_subscription")

        subscription = await self._gateway.create_subscription(
            customer_id, self._price_id, count, payment_method_id
        )
        if not subscription.is_paid:
            logger.info(
                "Subscription %s for company %s not paid (status %s)",
                subscription.id,
                company.id,
                subscription.status,
            )
            raise PaymentException(
                subscription.failure_message or "Your payment could not be completed",
                step="create_subscription",
            )

        fields = {
            "Status": SubscriptionStatus.PAYING.value,
            "Subscription Id": subscription.id,
            "Quantity": count,
            "Monthly Price": float(result.monthly_price),
            "Updated At": utc_now(),
        }
        if subscription_doc is not None:
            await self._records.update(subscription_doc.ref, fields)
        else:
            await self._records.add(
                COLLECTION_SUBSCRIPTIONS,
                {"User": company, "Customer Id": customer_id, **fields},
            )
        add_span_event("subscription_paid", {"quantity": count, "company_admin": company})
        logger.info("Company %s subscribed with %d ads account(s)", company.id, count)

        result.subscription = subscription
        result.invoices = await self._gateway.list_invoices(
            customer_id, limit=self._invoices_limit
        )
        return result

    async def _set_up_payment(
        self,
        form: BillingForm,
        company: DocumentRef,
        mirror: Record | None,
        customer_id: str | None,
    ) -> tuple[str, str]:
        """Create the payment method, reuse or create the customer, persist both."""
        contact = mirror.data if mirror is not None else {}
        email = contact.get("Email") or form.email
        name = contact.get("Company Name") or contact.get("Name") or form.company_name or form.name

        payment_method = await self._gateway.create_payment_method(
            form.card_token, form.name, form.email, form.address, form.phone
        )
        if not customer_id:
            customer = await self._gateway.create_customer(
                email=email,
                name=name,
                payment_method_id=payment_method.id,
                address=form.address,
                metadata={"company_admin": company.id},
            )
            customer_id = customer.id
            logger.info("Created billing customer for company %s", company.id)

        await self._records.add(
            COLLECTION_PAYMENT_METHODS,
            {
                "User": company,
                "Payment Method Id": payment_method.id,
                "Customer Id": customer_id,
                "Brand": payment_method.brand,
                "Last4": payment_method.last4,
                "Exp Month": payment_method.exp_month,
                "Exp Year": payment_method.exp_year,
                "Created At": utc_now(),
            },
        )
        await self._backfill_address(form, company, mirror, customer_id)
        add_span_event("payment_method_created")
        return payment_method.id, customer_id

    async def _backfill_address(
        self,
        form: BillingForm,
        company: DocumentRef,
        mirror: Record | None,
        customer_id: str,
    ) -> None:
        address = form.address
        country_name = await self._countries.resolve(address.country)
        fields: dict[str, Any] = {
            "Address Line 1": address.line1,
            "Address Line 2": address.line2,
            "City": address.city,
            "State": address.state,
            "Postal Code": address.postal_code,
            "Country Code": address.country,
            "Country": country_name,
            "Customer Id": customer_id,
        }
        if mirror is not None:
            await self._records.update(mirror.ref, fields)
            return
        await self._records.add(
            COLLECTION_STRIPE_COMPANIES,
            {
                "User": company,
                "Name": form.name,
                "Email": form.email,
                "Company Name": form.company_name,
                "Phone": form.phone,
                **fields,
            },
        )

    async def _record_customer(
        self,
        company: DocumentRef,
        subscription_doc: Record | None,
        customer_id: str,
    ) -> Record:
        if subscription_doc is not None:
            await self._records.update(subscription_doc.ref, {"Customer Id": customer_id})
            return Record(subscription_doc.ref, {**subscription_doc.data, "Customer Id": customer_id})
        data = {
            "User": company,
            "Customer Id": customer_id,
            "Status": SubscriptionStatus.NOT_PAYING.value,
        }
        ref = await self._records.add(COLLECTION_SUBSCRIPTIONS, data)
        return Record(ref, data)

    async def list_invoices(self, company_admin: DocumentRef | str) -> list[InvoiceResult]:
        """Recent invoices of the company's customer; empty without a customer."""
        company = DocumentRef.coerce(company_admin)
        customer_id = _customer_id(
            await self._first(COLLECTION_SUBSCRIPTIONS, company),
            await self._first(COLLECTION_PAYMENT_METHODS, company),
            await self._first(COLLECTION_STRIPE_COMPANIES, company),
        )
        if not customer_id:
            return []
        return await self._gateway.list_invoices(customer_id, limit=self._invoices_limit)


def _customer_id(*docs: Record | None) -> str | None:
    for doc in docs:
        if doc is not None and doc.get("Customer Id"):
            return doc.get("Customer Id")
    return None
