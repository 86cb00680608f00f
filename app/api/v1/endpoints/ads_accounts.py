"""Ads-account selection API: the accounts the signed-in user sees and the selected one."""

from fastapi import APIRouter, HTTPException, Request

from app.api.v1.dependencies import CurrentSession, CurrentUser
from app.core.limiter import limit_writes
from app.domain.exceptions import ResourceNotFoundException
from app.schemas.ads_account import (
    CurrencySymbolRequest,
    SelectAdsAccountRequest,
    UserAdsAccountsResponse,
)

router = APIRouter()


@router.get("/mine", response_model=UserAdsAccountsResponse)
async def get_my_ads_accounts(
    user: CurrentUser, session: CurrentSession, refresh: bool = False
) -> UserAdsAccountsResponse:
    """Visible accounts; loading them again resets the selection."""
    store = session.ads_accounts
    async with session.lock:
        if refresh or not store.loaded:
            await store.fetch_user_ads_accounts(user)
            if store.error:
                raise HTTPException(status_code=502, detail=store.error)
        return UserAdsAccountsResponse.from_store(store)


@router.put("/mine/selected", response_model=UserAdsAccountsResponse)
async def select_ads_account(
    body: SelectAdsAccountRequest, user: CurrentUser, session: CurrentSession
) -> UserAdsAccountsResponse:
    """Select one of the visible accounts by id, or clear the selection."""
    store = session.ads_accounts
    async with session.lock:
        if not store.loaded:
            await store.fetch_user_ads_accounts(user)
            if store.error:
                raise HTTPException(status_code=502, detail=store.error)
        store.select_by_id(body.account_id)
        return UserAdsAccountsResponse.from_store(store)


@router.patch("/{account_id}/currency-symbol", response_model=UserAdsAccountsResponse)
@limit_writes
async def update_currency_symbol(
    request: Request,
    account_id: str,
    body: CurrencySymbolRequest,
    user: CurrentUser,
    session: CurrentSession,
) -> UserAdsAccountsResponse:
    """Persist the account's currency symbol; only for accounts the user sees."""
    store = session.ads_accounts
    async with session.lock:
        if not store.loaded:
            await store.fetch_user_ads_accounts(user)
            if store.error:
                raise HTTPException(status_code=502, detail=store.error)
        if not any(a["id"] == account_id for a in store.user_ads_accounts):
            raise ResourceNotFoundException("ads_account", account_id)
        await store.update_currency_symbol(account_id, body.currency_symbol)
        if store.error:
            raise HTTPException(status_code=502, detail=store.error)
        return UserAdsAccountsResponse.from_store(store)
