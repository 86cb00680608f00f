"""Service interfaces (ports) for the application layer.

Protocols define contracts for external collaborators (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.billing import (
        BillingAddress,
        CustomerResult,
        InvoiceResult,
        PaymentMethodResult,
        SubscriptionResult,
    )


# Payment gateway interface
class IPaymentGateway(Protocol):
    """Protocol for the payment provider (Stripe in production)."""

    async def create_payment_method(
        self,
        card_token: str,
        name: str,
        email: str,
        address: BillingAddress,
        phone: str | None = None,
    ) -> PaymentMethodResult:
        """Create a card payment method from a client-side token."""

    async def create_customer(
        self,
        email: str,
        name: str,
        payment_method_id: str,
        address: BillingAddress,
        metadata: dict[str, str] | None = None,
    ) -> CustomerResult:
        """Create a customer with payment_method_id as default."""

    async def create_subscription(
        self,
        customer_id: str,
        price_id: str,
        quantity: int,
        payment_method_id: str | None = None,
    ) -> SubscriptionResult:
        """Subscribe the customer to price_id with quantity seats.

        A declined first payment is reported through the result status
        (incomplete) and failure_message, not raised.
        """

    async def list_invoices(
        self, customer_id: str, limit: int = 10
    ) -> list[InvoiceResult]:
        """Return the customer's most recent invoices (newest first)."""


# Email dispatcher interface
class IEmailDispatcher(Protocol):
    """Protocol for transactional email (hosted template endpoint)."""

    async def send(
        self,
        to: str,
        template_id: str,
        name: str,
        variables: dict[str, Any] | None = None,
    ) -> None:
        """Send a templated email. Raises EmailDispatchError on failure."""


# Country name resolver interface
class ICountryNameResolver(Protocol):
    """Protocol for resolving ISO alpha-2 codes to display names."""

    async def resolve(self, code: str) -> str:
        """Return the country name, or the code itself if unknown."""
