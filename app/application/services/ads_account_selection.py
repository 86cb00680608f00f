"""Per-user ads account visibility and selection."""

from __future__ import annotations

from typing import Any

from app.application.dtos.record import FieldFilter
from app.application.interfaces.repositories import IRecordStore
from app.application.services.settings_sync import connected_accounts_filters, user_ref
from app.domain.collections import COLLECTION_ADS_ACCOUNTS
from app.domain.entities.user import UserDocument
from app.domain.exceptions import AdAlertException, ResourceNotFoundException
from app.domain.value_objects.core import DocumentRef
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

AdsAccount = dict[str, Any]


class UserAdsAccountsStore:
    """Ads accounts the signed-in user may see, and the one currently selected.

    Accounts are the raw documents with their id under "id". A user sees an
    account only when the account is connected, belongs to the user's
    company and references the user in Selected Users.
    """

    def __init__(self, records: IRecordStore) -> None:
        self._records = records
        self.user_ads_accounts: list[AdsAccount] = []
        self.selected_ads_account: AdsAccount | None = None
        self.loaded = False
        self.loading = False
        self.error: str | None = None

    async def fetch_user_ads_accounts(self, user: UserDocument) -> None:
        """Load visible accounts; exactly one visible account is auto-selected."""
        self.loading = True
        self.error = None
        try:
            records = await self._records.query(
                COLLECTION_ADS_ACCOUNTS,
                [
                    *connected_accounts_filters(user.company_admin),
                    FieldFilter("Selected Users", "array-contains", user_ref(user.uid)),
                ],
            )
        except AdAlertException as e:
            logger.warning("Failed to load ads accounts for user %s: %s", user.uid, e.message)
            self.error = e.message
            return
        finally:
            self.loading = False
        self.user_ads_accounts = [{"id": r.id, **r.data} for r in records]
        self.loaded = True
        self.selected_ads_account = (
            self.user_ads_accounts[0] if len(self.user_ads_accounts) == 1 else None
        )

    def set_selected_ads_account(self, account: AdsAccount | None) -> None:
        """Replace the selection, even with the same id (its data may have changed)."""
        self.selected_ads_account = account

    def select_by_id(self, account_id: str | None) -> AdsAccount | None:
        """Select a visible account by id, or clear the selection with None."""
        if account_id is None:
            self.set_selected_ads_account(None)
            return None
        for account in self.user_ads_accounts:
            if account["id"] == account_id:
                self.set_selected_ads_account(account)
                return account
        raise ResourceNotFoundException("ads_account", account_id)

    def update_ads_account(self, account_id: str, updates: dict[str, Any]) -> None:
        """Patch the cached account (and the selection) locally, without persisting."""
        self.user_ads_accounts = [
            {**account, **updates} if account["id"] == account_id else account
            for account in self.user_ads_accounts
        ]
        selected = self.selected_ads_account
        if selected is not None and selected["id"] == account_id:
            self.selected_ads_account = {**selected, **updates}

    async def update_currency_symbol(self, account_id: str, symbol: str) -> None:
        """Persist Currency Symbol, then patch the cache. Failures are recorded, not raised."""
        self.error = None
        try:
            await self._records.update(
                DocumentRef(COLLECTION_ADS_ACCOUNTS, account_id),
                {"Currency Symbol": symbol},
            )
        except AdAlertException as e:
            logger.warning(
                "Failed to update currency symbol for ads account %s: %s",
                account_id,
                e.message,
            )
            self.error = e.message
            return
        self.update_ads_account(account_id, {"Currency Symbol": symbol})
