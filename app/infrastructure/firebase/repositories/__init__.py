"""Firestore-backed repository implementations."""

from app.infrastructure.firebase.repositories.record_store_firestore import (
    FirestoreRecordStore,
)

__all__ = [
    "FirestoreRecordStore",
]
