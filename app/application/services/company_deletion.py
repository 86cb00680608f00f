"""Cascading deletion of a company's whole record graph."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from app.application.dtos.record import FieldFilter, Record
from app.application.interfaces.repositories import IRecordStore
from app.domain.collections import (
    COLLECTION_ADS_ACCOUNT_VARIABLES,
    COLLECTION_ADS_ACCOUNTS,
    COLLECTION_ALERT_SETTINGS,
    COLLECTION_ALERTS,
    COLLECTION_AUTH_TOKENS,
    COLLECTION_DASHBOARD_SUMMARIES,
    COLLECTION_PAGE_TRACKERS,
    COLLECTION_PAYMENT_METHODS,
    COLLECTION_STRIPE_COMPANIES,
    COLLECTION_SUBSCRIPTIONS,
    COLLECTION_USERS,
)
from app.domain.value_objects.core import DocumentRef
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import add_span_event, traced

logger = get_logger(__name__)

# Per-user collections, deleted in this order after the company-level ones.
USER_SCOPED_COLLECTIONS: tuple[str, ...] = (
    COLLECTION_ALERT_SETTINGS,
    COLLECTION_PAGE_TRACKERS,
    COLLECTION_DASHBOARD_SUMMARIES,
    COLLECTION_STRIPE_COMPANIES,
    COLLECTION_SUBSCRIPTIONS,
    COLLECTION_PAYMENT_METHODS,
    COLLECTION_AUTH_TOKENS,
)


@dataclass
class DeletionReport:
    """Documents deleted per collection, in deletion order."""

    company_admin_id: str
    deleted: dict[str, int] = field(default_factory=dict)

    def add(self, collection: str, count: int) -> None:
        self.deleted[collection] = self.deleted.get(collection, 0) + count

    @property
    def total(self) -> int:
        return sum(self.deleted.values())


class CompanyDeletionService:
    """Deletes every record of a company, one collection at a time.

    Steps run strictly in sequence; the deletes inside a step run
    concurrently and are all awaited before the next step. There is no
    transaction: if a step fails, earlier steps stay deleted.
    """

    def __init__(self, records: IRecordStore) -> None:
        self._records = records

    async def _delete_all(self, docs: list[Record]) -> int:
        await asyncio.gather(*(self._records.delete(d.ref) for d in docs))
        return len(docs)

    async def _delete_where(
        self, collection: str, field_name: str, values: list[DocumentRef]
    ) -> int:
        """Delete documents of collection whose field equals any of values."""
        found: list[Record] = []
        for value in values:
            found.extend(
                await self._records.query(collection, [FieldFilter(field_name, "==", value)])
            )
        return await self._delete_all(found)

    @traced("company.delete_account")
    async def delete_company_account(
        self,
        company_admin: DocumentRef | str,
        logout: Callable[[], Awaitable[None]],
    ) -> DeletionReport:
        """Delete the company graph, then call logout().

        Order: ads account variables (by company, then by each ads account),
        alerts, ads accounts, the per-user collections of every company user,
        the users themselves.
        """
        company = DocumentRef.coerce(company_admin)
        report = DeletionReport(company_admin_id=company.id)
        logger.info("Deleting company %s", company.id)

        report.add(
            COLLECTION_ADS_ACCOUNT_VARIABLES,
            await self._delete_where(COLLECTION_ADS_ACCOUNT_VARIABLES, "User", [company]),
        )

        ads_accounts = await self._records.query(
            COLLECTION_ADS_ACCOUNTS, [FieldFilter("User", "==", company)]
        )
        report.add(
            COLLECTION_ADS_ACCOUNT_VARIABLES,
            await self._delete_where(
                COLLECTION_ADS_ACCOUNT_VARIABLES,
                "Ads Account",
                [a.ref for a in ads_accounts],
            ),
        )
        add_span_event("ads_account_variables_deleted")

        report.add(
            COLLECTION_ALERTS,
            await self._delete_where(COLLECTION_ALERTS, "User", [company]),
        )
        report.add(COLLECTION_ADS_ACCOUNTS, await self._delete_all(ads_accounts))
        add_span_event("ads_accounts_deleted")

        users = await self._records.query(
            COLLECTION_USERS, [FieldFilter("Company Admin", "==", company)]
        )
        user_refs = [u.ref for u in users]
        if company not in user_refs:
            user_refs.append(company)

        for collection in USER_SCOPED_COLLECTIONS:
            count = await self._delete_where(collection, "User", user_refs)
            report.add(collection, count)
            logger.info("Company %s: deleted %d from %s", company.id, count, collection)

        await asyncio.gather(*(self._records.delete(ref) for ref in user_refs))
        report.add(COLLECTION_USERS, len(user_refs))
        add_span_event("users_deleted", {"count": len(user_refs)})

        logger.info("Deleted company %s (%d documents)", company.id, report.total)
        await logout()
        return report
