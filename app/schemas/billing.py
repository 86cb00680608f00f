"""Billing API schemas: subscription form, provisioning result, invoices."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.application.dtos.billing import (
    BillingAddress,
    InvoiceResult,
    ProvisioningResult,
)
from app.application.dtos.settings import BillingRecord
from app.schemas.documents import jsonable_document
from app.shared.utils.sanitization import sanitize_text


class BillingAddressRequest(BaseModel):
    line1: str = Field(..., min_length=1)
    line2: str | None = None
    city: str = Field(..., min_length=1)
    state: str | None = None
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2, max_length=2, description="ISO 3166-1 alpha-2")

    def to_dto(self) -> BillingAddress:
        return BillingAddress(
            line1=self.line1,
            line2=self.line2,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country.upper(),
        )


class SubscribeRequest(BaseModel):
    """Billing form. card_token is created client-side by the payment provider."""

    card_token: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    company_name: str | None = Field(default=None, max_length=200)
    phone: str | None = Field(default=None, max_length=40)
    address: BillingAddressRequest

    @field_validator("name", "company_name")
    @classmethod
    def clean_text(cls, v: str | None) -> str | None:
        return sanitize_text(v)


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: str | None
    amount_due: int
    amount_paid: int
    currency: str
    created: datetime
    hosted_invoice_url: str | None = None
    invoice_pdf: str | None = None

    @classmethod
    def from_result(cls, invoice: InvoiceResult) -> "InvoiceResponse":
        return cls.model_validate(invoice)


class SubscribeResponse(BaseModel):
    company_admin_id: str
    connected_count: int
    monthly_price: Decimal
    customer_id: str | None = None
    payment_method_id: str | None = None
    subscription_id: str | None = None
    subscription_status: str | None = None
    invoices: list[InvoiceResponse] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ProvisioningResult) -> "SubscribeResponse":
        subscription = result.subscription
        return cls(
            company_admin_id=result.company_admin_id,
            connected_count=result.connected_count,
            monthly_price=result.monthly_price,
            customer_id=result.customer_id,
            payment_method_id=result.payment_method_id,
            subscription_id=subscription.id if subscription else None,
            subscription_status=subscription.status if subscription else None,
            invoices=[InvoiceResponse.from_result(i) for i in result.invoices],
        )


class PriceResponse(BaseModel):
    """Monthly price for the company's connected ads accounts."""

    connected_count: int
    monthly_price: Decimal


class BillingRecordResponse(BaseModel):
    """A billing mirror document; id and data are None when the company has none."""

    id: str | None = None
    data: dict[str, Any] | None = None
    loaded: bool = True

    @classmethod
    def from_record(cls, record: BillingRecord | None, loaded: bool) -> "BillingRecordResponse":
        if record is None:
            return cls(loaded=loaded)
        return cls(id=record.id, data=jsonable_document(record.data), loaded=loaded)
