"""Stripe payment gateway (implements IPaymentGateway) using the async Stripe SDK."""

from __future__ import annotations

from typing import Any

import stripe

from app.application.dtos.billing import (
    BillingAddress,
    CustomerResult,
    InvoiceResult,
    PaymentMethodResult,
    SubscriptionResult,
)
from app.domain.exceptions import PaymentException
from app.infrastructure.exceptions import PaymentGatewayError
from app.shared.telemetry.logging import get_logger
from app.shared.utils.datetime import from_timestamp_utc

logger = get_logger(__name__)


def configure_stripe(secret_key: str) -> None:
    """Configure the stripe module with the secret key."""
    stripe.api_key = secret_key


def _address(address: BillingAddress) -> dict[str, Any]:
    out = {
        "line1": address.line1,
        "city": address.city,
        "postal_code": address.postal_code,
        "country": address.country,
    }
    if address.line2:
        out["line2"] = address.line2
    if address.state:
        out["state"] = address.state
    return out


def _failure_message(subscription: Any) -> str | None:
    """Pull last_payment_error.message from an expanded latest_invoice, if any."""
    try:
        intent = subscription.latest_invoice.payment_intent
        error = intent.last_payment_error if intent else None
    except (AttributeError, KeyError):
        return None
    return error.message if error else None


class StripePaymentGateway:
    """Payment provider calls for card setup, customers, subscriptions and invoices.

    Card declines surface as PaymentException (user-facing message from
    Stripe); any other Stripe error becomes PaymentGatewayError.
    """

    def __init__(self, secret_key: str | None = None) -> None:
        if secret_key:
            configure_stripe(secret_key)

    def _wrap(self, operation: str, exc: stripe.StripeError) -> Exception:
        message = exc.user_message or str(exc)
        if isinstance(exc, stripe.CardError):
            logger.info("Card declined during %s: %s", operation, exc.code)
            return PaymentException(message, step=operation)
        logger.warning("Stripe %s failed: %s", operation, exc)
        return PaymentGatewayError(operation, message)

    async def create_payment_method(
        self,
        card_token: str,
        name: str,
        email: str,
        address: BillingAddress,
        phone: str | None = None,
    ) -> PaymentMethodResult:
        billing_details: dict[str, Any] = {
            "name": name,
            "email": email,
            "address": _address(address),
        }
        if phone:
            billing_details["phone"] = phone
        try:
            pm = await stripe.PaymentMethod.create_async(
                type="card",
                card={"token": card_token},
                billing_details=billing_details,
            )
        except stripe.StripeError as e:
            raise self._wrap("create_payment_method", e) from e
        card = pm.card
        return PaymentMethodResult(
            id=pm.id,
            brand=card.brand if card else None,
            last4=card.last4 if card else None,
            exp_month=card.exp_month if card else None,
            exp_year=card.exp_year if card else None,
        )

    async def create_customer(
        self,
        email: str,
        name: str,
        payment_method_id: str,
        address: BillingAddress,
        metadata: dict[str, str] | None = None,
    ) -> CustomerResult:
        try:
            customer = await stripe.Customer.create_async(
                email=email,
                name=name,
                address=_address(address),
                payment_method=payment_method_id,
                invoice_settings={"default_payment_method": payment_method_id},
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            raise self._wrap("create_customer", e) from e
        return CustomerResult(id=customer.id, email=customer.email, name=customer.name)

    async def create_subscription(
        self,
        customer_id: str,
        price_id: str,
        quantity: int,
        payment_method_id: str | None = None,
    ) -> SubscriptionResult:
        params: dict[str, Any] = {
            "customer": customer_id,
            "items": [{"price": price_id, "quantity": quantity}],
            "payment_behavior": "allow_incomplete",
            "expand": ["latest_invoice.payment_intent"],
        }
        if payment_method_id:
            params["default_payment_method"] = payment_method_id
        try:
            subscription = await stripe.Subscription.create_async(**params)
        except stripe.StripeError as e:
            raise self._wrap("create_subscription", e) from e
        return SubscriptionResult(
            id=subscription.id,
            status=subscription.status,
            quantity=quantity,
            failure_message=_failure_message(subscription),
        )

    async def list_invoices(
        self, customer_id: str, limit: int = 10
    ) -> list[InvoiceResult]:
        try:
            page = await stripe.Invoice.list_async(customer=customer_id, limit=limit)
        except stripe.StripeError as e:
            raise self._wrap("list_invoices", e) from e
        return [
            InvoiceResult(
                id=inv.id,
                status=inv.status,
                amount_due=inv.amount_due,
                amount_paid=inv.amount_paid,
                currency=inv.currency,
                created=from_timestamp_utc(inv.created),
                hosted_invoice_url=inv.get("hosted_invoice_url"),
                invoice_pdf=inv.get("invoice_pdf"),
            )
            for inv in page.data
        ]
