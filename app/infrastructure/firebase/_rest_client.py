"""Firestore REST v1 transport (no firebase-admin, no grpc).

Service-account tokens come from google-auth; every call goes through one
httpx.AsyncClient. Paths are relative to the database root
(``users/abc``); values are converted by _rest_encoding.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from app.infrastructure.firebase._rest_encoding import (
    _encode_value,
    decode_document,
    encode_document,
    quote_field_path,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_LIST_PAGE_SIZE = 300

_OPERATORS: dict[str, str] = {
    "==": "EQUAL",
    "array-contains": "ARRAY_CONTAINS",
}

# (doc_id, decoded fields)
DocumentData = tuple[str, dict[str, Any]]


def service_account_credentials(key_dict: dict[str, Any]) -> service_account.Credentials:
    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


class DocumentNotFoundError(Exception):
    """An update targeted a document that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"No document to update: {path}")
        self.path = path


def _doc_id(name: str) -> str:
    return name.rsplit("/", 1)[-1]


class FirestoreRESTClient:
    """Document reads, writes and AND-queries against one Firestore database."""

    def __init__(
        self,
        project_id: str,
        credentials: Any,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._root = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None
        self._token_lock = asyncio.Lock()

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def root(self) -> str:
        """Resource-name prefix of the database, used for referenceValue fields."""
        return self._root

    async def aclose(self) -> None:
        """Close the HTTP client unless it was injected (the app owns that one)."""
        if self._owns_http:
            await self._http.aclose()

    async def _token(self) -> str:
        if not self._credentials.valid:
            async with self._token_lock:
                if not self._credentials.valid:
                    # google-auth refresh is blocking
                    await asyncio.to_thread(self._credentials.refresh, GoogleAuthRequest())
        return self._credentials.token

    async def _send(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> httpx.Response:
        url = f"{_BASE}/{self._root}/{path}" if path else f"{_BASE}/{self._root}"
        return await self._http.request(
            method,
            url,
            headers={"Authorization": f"Bearer {await self._token()}"},
            json=body,
            params=params,
        )

    async def get_document(self, path: str) -> dict[str, Any] | None:
        """Decoded fields of the document, or None when it does not exist."""
        resp = await self._send("GET", path)
        if resp.status_code == 404:
            return None
        resp.raise_for_status()
        return decode_document(resp.json())

    async def set_document(self, path: str, data: dict[str, Any]) -> None:
        """Create or fully replace the document."""
        resp = await self._send("PATCH", path, body=encode_document(data, self._root))
        resp.raise_for_status()

    async def update_document(self, path: str, fields: dict[str, Any]) -> None:
        """Write only the given fields; the document must already exist."""
        params = [("updateMask.fieldPaths", quote_field_path(k)) for k in fields]
        params.append(("currentDocument.exists", "true"))
        resp = await self._send(
            "PATCH", path, body=encode_document(fields, self._root), params=params
        )
        if resp.status_code == 404:
            raise DocumentNotFoundError(path)
        resp.raise_for_status()

    async def create_document(self, collection: str, data: dict[str, Any]) -> str:
        """Create a document with a Firestore-generated id and return the id."""
        resp = await self._send("POST", collection, body=encode_document(data, self._root))
        resp.raise_for_status()
        return _doc_id(resp.json()["name"])

    async def delete_document(self, path: str) -> None:
        """Delete the document; a missing document is not an error."""
        resp = await self._send("DELETE", path)
        if resp.status_code != 404:
            resp.raise_for_status()

    def _filter(self, field: str, op: str, value: Any) -> dict[str, Any]:
        return {
            "fieldFilter": {
                "field": {"fieldPath": quote_field_path(field)},
                "op": _OPERATORS[op],
                "value": _encode_value(value, self._root),
            }
        }

    def structured_query(
        self, collection: str, filters: Sequence[tuple[str, str, Any]]
    ) -> dict[str, Any]:
        """runQuery body for collection with the filters ANDed."""
        query: dict[str, Any] = {"from": [{"collectionId": collection}]}
        if len(filters) == 1:
            query["where"] = self._filter(*filters[0])
        elif filters:
            query["where"] = {
                "compositeFilter": {
                    "op": "AND",
                    "filters": [self._filter(*f) for f in filters],
                }
            }
        return query

    async def run_query(
        self, collection: str, filters: Sequence[tuple[str, str, Any]]
    ) -> list[DocumentData]:
        resp = await self._http.post(
            f"{_BASE}/{self._root}:runQuery",
            headers={"Authorization": f"Bearer {await self._token()}"},
            json={"structuredQuery": self.structured_query(collection, filters)},
        )
        resp.raise_for_status()
        # runQuery streams one result per document; results without "document"
        # only carry read times.
        return [
            (_doc_id(item["document"]["name"]), decode_document(item["document"]))
            for item in resp.json()
            if "document" in item
        ]

    async def list_documents(self, collection: str) -> list[DocumentData]:
        """Every document of the collection, following page tokens."""
        found: list[DocumentData] = []
        page_token: str | None = None
        while True:
            params = [("pageSize", str(_LIST_PAGE_SIZE))]
            if page_token:
                params.append(("pageToken", page_token))
            resp = await self._send("GET", collection, params=params)
            resp.raise_for_status()
            page = resp.json()
            found.extend((_doc_id(d["name"]), decode_document(d)) for d in page.get("documents", []))
            page_token = page.get("nextPageToken")
            if not page_token:
                return found
