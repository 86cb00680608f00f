"""Settings sessions: per-user coordination of the settings and ads-account stores.

Each signed-in user gets one SettingsSession holding their own store
instances; nothing is shared between users. Sessions expire after an idle
TTL and are dropped on logout or company deletion.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from app.application.dtos.billing import BillingForm, ProvisioningResult
from app.application.services.ads_account_selection import UserAdsAccountsStore
from app.application.services.company_deletion import (
    CompanyDeletionService,
    DeletionReport,
)
from app.application.services.settings_sync import SettingsSyncStore
from app.application.services.subscription_provisioning import (
    SubscriptionProvisioningService,
)
from app.domain.value_objects.core import DocumentRef
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SettingsSession:
    """Both store slices of one user plus the services that act on them.

    Hold ``lock`` while reading or mutating the stores so concurrent
    requests of the same user see consistent loading/error state.
    """

    uid: str
    settings: SettingsSyncStore
    ads_accounts: UserAdsAccountsStore
    deletion: CompanyDeletionService
    provisioning: SubscriptionProvisioningService
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    last_used: float = field(default_factory=time.monotonic)

    def touch(self, now: float | None = None) -> None:
        self.last_used = time.monotonic() if now is None else now

    async def delete_company(
        self,
        company_admin: DocumentRef | str,
        logout: Callable[[], Awaitable[None]],
    ) -> DeletionReport:
        return await self.deletion.delete_company_account(company_admin, logout)

    async def provision_subscription(self, form: BillingForm) -> ProvisioningResult:
        """Run provisioning; billing slices are reloaded on next fetch either way."""
        try:
            return await self.provisioning.provision(form)
        finally:
            self.settings.invalidate_billing()


SessionFactory = Callable[[str], SettingsSession]


class SettingsSessionRegistry:
    """Process-local sessions keyed by uid with an idle TTL."""

    def __init__(
        self,
        factory: SessionFactory,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, SettingsSession] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, session: SettingsSession, now: float) -> bool:
        return now - session.last_used > self._ttl

    async def get_or_create(self, uid: str) -> SettingsSession:
        """Return the user's live session, replacing it if it has expired."""
        async with self._lock:
            now = self._clock()
            session = self._sessions.get(uid)
            if session is None or self._expired(session, now):
                session = self._factory(uid)
                self._sessions[uid] = session
                logger.debug("Opened settings session for user %s", uid)
            session.touch(now)
            return session

    async def discard(self, uid: str) -> bool:
        async with self._lock:
            removed = self._sessions.pop(uid, None) is not None
        if removed:
            logger.debug("Closed settings session for user %s", uid)
        return removed

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [uid for uid, s in self._sessions.items() if self._expired(s, now)]
            for uid in expired:
                del self._sessions[uid]
        return len(expired)
