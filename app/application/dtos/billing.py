"""DTOs for billing: form input and payment-provider results."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from app.domain.value_objects.core import DocumentRef


@dataclass(frozen=True)
class BillingAddress:
    """Postal address as entered on the billing form (country is an ISO alpha-2 code)."""

    line1: str
    city: str
    postal_code: str
    country: str
    line2: str | None = None
    state: str | None = None


@dataclass(frozen=True)
class BillingForm:
    """Billing form submission.

    card_token is a provider token created client-side (no raw card data
    reaches this service). company_admin is a reference or a path string.
    """

    company_admin: DocumentRef | str
    card_token: str
    name: str
    email: str
    address: BillingAddress
    company_name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class PaymentMethodResult:
    id: str
    brand: str | None = None
    last4: str | None = None
    exp_month: int | None = None
    exp_year: int | None = None


@dataclass(frozen=True)
class CustomerResult:
    id: str
    email: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class SubscriptionResult:
    id: str
    status: str
    quantity: int
    # Provider message when the first payment did not go through.
    failure_message: str | None = None

    @property
    def is_paid(self) -> bool:
        return self.status in ("active", "trialing")


@dataclass(frozen=True)
class InvoiceResult:
    id: str
    status: str | None
    amount_due: int
    amount_paid: int
    currency: str
    created: datetime
    hosted_invoice_url: str | None = None
    invoice_pdf: str | None = None


@dataclass
class ProvisioningResult:
    """Outcome of the subscription payment sequence."""

    company_admin_id: str
    connected_count: int
    monthly_price: Decimal
    customer_id: str | None
    payment_method_id: str | None
    subscription: SubscriptionResult | None = None
    invoices: list[InvoiceResult] = field(default_factory=list)
