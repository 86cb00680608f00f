"""Billing API: subscription mirrors, price quote, subscribe, invoices. Admin only."""

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import (
    AdminUser,
    CurrentSession,
    ensure_loaded,
    require_billing_configured,
)
from app.application.dtos.billing import BillingForm
from app.core.limiter import limit_billing
from app.schemas.billing import (
    BillingRecordResponse,
    InvoiceResponse,
    PriceResponse,
    SubscribeRequest,
    SubscribeResponse,
)

router = APIRouter()


@router.get("/subscription", response_model=BillingRecordResponse)
async def get_subscription(
    user: AdminUser, session: CurrentSession, refresh: bool = False
) -> BillingRecordResponse:
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_subscription(user.company_admin)
        else:
            await store.fetch_subscription(user.company_admin)
        ensure_loaded(store.subscription_loaded, store.error, refreshed=refresh)
        return BillingRecordResponse.from_record(store.subscription, loaded=True)


@router.get("/payment-method", response_model=BillingRecordResponse)
async def get_payment_method(
    user: AdminUser, session: CurrentSession, refresh: bool = False
) -> BillingRecordResponse:
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_payment_method(user.company_admin)
        else:
            await store.fetch_payment_method(user.company_admin)
        ensure_loaded(store.payment_method_loaded, store.error, refreshed=refresh)
        return BillingRecordResponse.from_record(store.payment_method, loaded=True)


@router.get("/stripe-company", response_model=BillingRecordResponse)
async def get_stripe_company(
    user: AdminUser, session: CurrentSession, refresh: bool = False
) -> BillingRecordResponse:
    store = session.settings
    async with session.lock:
        if refresh:
            await store.refresh_stripe_company(user.company_admin)
        else:
            await store.fetch_stripe_company(user.company_admin)
        ensure_loaded(store.stripe_company_loaded, store.error, refreshed=refresh)
        return BillingRecordResponse.from_record(store.stripe_company, loaded=True)


@router.get("/price", response_model=PriceResponse)
async def get_price(user: AdminUser, session: CurrentSession) -> PriceResponse:
    """Monthly price for the company's currently connected ads accounts."""
    count, price = await session.provisioning.quote(user.company_admin)
    return PriceResponse(connected_count=count, monthly_price=price)


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    dependencies=[Depends(require_billing_configured)],
)
@limit_billing
async def subscribe(
    request: Request,
    body: SubscribeRequest,
    user: AdminUser,
    session: CurrentSession,
) -> SubscribeResponse:
    """Save the card, ensure a customer and subscribe one seat per connected ads account.

    A declined card or unpaid first invoice answers 402 with the provider's message.
    """
    form = BillingForm(
        company_admin=user.company_admin,
        card_token=body.card_token,
        name=body.name,
        email=str(body.email).lower(),
        address=body.address.to_dto(),
        company_name=body.company_name,
        phone=body.phone,
    )
    async with session.lock:
        result = await session.provision_subscription(form)
    return SubscribeResponse.from_result(result)


@router.get(
    "/invoices",
    response_model=list[InvoiceResponse],
    dependencies=[Depends(require_billing_configured)],
)
async def list_invoices(
    user: AdminUser, session: CurrentSession
) -> list[InvoiceResponse]:
    """Most recent invoices of the company's billing customer."""
    invoices = await session.provisioning.list_invoices(user.company_admin)
    return [InvoiceResponse.from_result(i) for i in invoices]
