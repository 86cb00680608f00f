"""Security: Firebase ID token verification."""

from app.infrastructure.security.firebase_token import (
    verify_firebase_id_token,
    verify_firebase_id_token_sync,
)

__all__ = [
    "verify_firebase_id_token",
    "verify_firebase_id_token_sync",
]
