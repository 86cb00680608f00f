"""Firestore integration: REST client lifecycle and the record store adapter."""

from app.infrastructure.firebase.client import (
    close_firebase,
    get_firebase_project_id,
    get_firestore_client,
    init_firebase,
)

__all__ = [
    "close_firebase",
    "get_firebase_project_id",
    "get_firestore_client",
    "init_firebase",
]
