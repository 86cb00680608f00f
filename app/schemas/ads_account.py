"""Ads-account selection API schemas."""

from typing import Any

from pydantic import BaseModel, Field

from app.application.services.ads_account_selection import UserAdsAccountsStore
from app.schemas.documents import jsonable_document


class UserAdsAccountsResponse(BaseModel):
    """Ads accounts visible to the signed-in user and the current selection."""

    items: list[dict[str, Any]]
    selected: dict[str, Any] | None = None

    @classmethod
    def from_store(cls, store: UserAdsAccountsStore) -> "UserAdsAccountsResponse":
        return cls(
            items=[jsonable_document(a) for a in store.user_ads_accounts],
            selected=(
                jsonable_document(store.selected_ads_account)
                if store.selected_ads_account is not None
                else None
            ),
        )


class SelectAdsAccountRequest(BaseModel):
    """Select a visible account by id; null clears the selection."""

    account_id: str | None = None


class CurrencySymbolRequest(BaseModel):
    currency_symbol: str = Field(..., min_length=1, max_length=8)
