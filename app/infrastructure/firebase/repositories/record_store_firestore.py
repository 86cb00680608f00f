"""Firestore-backed record store (implements IRecordStore)."""

from __future__ import annotations

from collections.abc import Awaitable, Sequence
from typing import Any, TypeVar

import httpx
from google.auth import exceptions as google_auth_exceptions

from app.application.dtos.record import FieldFilter, Record
from app.domain.value_objects.core import DocumentRef
from app.infrastructure.exceptions import RecordStoreError
from app.infrastructure.firebase._rest_client import (
    DocumentNotFoundError,
    FirestoreRESTClient,
)
from app.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class FirestoreRecordStore:
    """Record store over the Firestore REST client.

    Transport and HTTP status errors are re-raised as RecordStoreError with
    the operation and target path so callers never see httpx types.
    """

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    def ref(self, collection: str, doc_id: str) -> DocumentRef:
        return DocumentRef(collection, doc_id)

    async def _call(self, operation: str, target: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except (
            httpx.HTTPError,
            google_auth_exceptions.GoogleAuthError,
            DocumentNotFoundError,
        ) as e:
            logger.warning("Firestore %s failed for %s: %s", operation, target, e)
            raise RecordStoreError(operation, target, str(e)) from e

    async def query(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> list[Record]:
        """Run an AND query; with no filters, list the whole collection."""
        if filters:
            call = self._client.run_query(
                collection, [(f.field, f.op, f.value) for f in filters]
            )
        else:
            call = self._client.list_documents(collection)
        found = await self._call("query", collection, call)
        return [Record(DocumentRef(collection, doc_id), data) for doc_id, data in found]

    async def get(self, ref: DocumentRef) -> Record | None:
        data = await self._call("get", ref.path, self._client.get_document(ref.path))
        return None if data is None else Record(ref, data)

    async def update(self, ref: DocumentRef, fields: dict[str, Any]) -> None:
        await self._call("update", ref.path, self._client.update_document(ref.path, fields))

    async def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        await self._call("set", ref.path, self._client.set_document(ref.path, data))

    async def add(self, collection: str, data: dict[str, Any]) -> DocumentRef:
        doc_id = await self._call(
            "add", collection, self._client.create_document(collection, data)
        )
        return DocumentRef(collection, doc_id)

    async def delete(self, ref: DocumentRef) -> None:
        await self._call("delete", ref.path, self._client.delete_document(ref.path))
