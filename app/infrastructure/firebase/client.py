"""Firestore client lifecycle (REST-based, no firebase-admin).

Initialized at app startup using either FIREBASE_SERVICE_ACCOUNT_KEY (JSON string)
or FIREBASE_SERVICE_ACCOUNT_PATH (file path). The project id of the service
account is also the default audience for Firebase ID tokens.
"""

import json
import logging
from pathlib import Path

import httpx

from app.core.config import get_settings
from app.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    service_account_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict() -> dict | None:
    """Return service account dict from env key or file path."""
    settings = get_settings()
    key = settings.firebase_service_account_key
    key_json = key.get_secret_value() if key else None
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if not path:
        return None
    resolved = Path(path).expanduser().resolve()
    if not resolved.is_file():
        logger.warning(
            "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
            path,
            resolved,
        )
        return None
    with open(resolved, encoding="utf-8") as f:
        return json.load(f)


def init_firebase(http_client: httpx.AsyncClient | None = None) -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Safe to call when no credentials are configured (no-op). On malformed
    credentials logs the exception and returns False so the app can start
    and answer 503 on routes that need Firestore.

    Args:
        http_client: Optional shared client; when given it is not closed by us.

    Returns:
        True if Firestore was initialized, False if disabled or on error.
    """
    global _firestore_client
    try:
        key_dict = _load_key_dict()
        if not key_dict:
            logger.info("Firestore credentials not configured; client disabled")
            return False

        project_id = key_dict.get("project_id")
        if not project_id:
            logger.error("Firebase service account JSON missing 'project_id'")
            return False

        cred = service_account_credentials(key_dict)
        _firestore_client = FirestoreRESTClient(
            project_id, cred, http_client=http_client
        )
        logger.info("Firestore client initialized for project %s", project_id)
        return True
    except Exception:
        logger.exception("Firebase initialization failed")
        return False


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not configured."""
    return _firestore_client


def get_firebase_project_id() -> str | None:
    """Audience for ID token verification: explicit setting, else the client's project."""
    configured = get_settings().firebase_project_id
    if configured:
        return configured
    return _firestore_client.project_id if _firestore_client else None


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call from app shutdown."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.info("Firestore HTTP client closed")
