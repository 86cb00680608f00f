"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain value objects only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from app.application.dtos.record import FieldFilter, Record
    from app.domain.value_objects.core import DocumentRef


# Record store interface
class IRecordStore(Protocol):
    """Protocol for the document record store (Firestore in production, in-memory in tests).

    Every method raises RecordStoreError on transport or backend failure.
    """

    def ref(self, collection: str, doc_id: str) -> DocumentRef:
        """Build a reference to collection/doc_id (no I/O)."""

    async def query(
        self, collection: str, filters: Sequence[FieldFilter] = ()
    ) -> list[Record]:
        """Return all documents of collection matching every filter (AND)."""

    async def get(self, ref: DocumentRef) -> Record | None:
        """Return the document or None if it does not exist."""

    async def update(self, ref: DocumentRef, fields: dict[str, Any]) -> None:
        """Merge fields into an existing document. Fails if the document is missing."""

    async def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        """Create or overwrite the document at ref."""

    async def add(self, collection: str, data: dict[str, Any]) -> DocumentRef:
        """Create a document with a generated id and return its reference."""

    async def delete(self, ref: DocumentRef) -> None:
        """Delete the document. Deleting a missing document is not an error."""
