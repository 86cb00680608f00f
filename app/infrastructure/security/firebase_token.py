"""Firebase ID token verification for authentication.

Uses google-auth to check the token signature against Google's public
certificates and the audience/issuer for the Firebase project.
"""

import asyncio
from typing import Any

from google.auth import exceptions as google_auth_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

_request = google_requests.Request()


def verify_firebase_id_token_sync(token: str, project_id: str) -> dict[str, Any]:
    """Verify and decode a Firebase ID token. Returns the claims.

    Enforces presence of sub (the Firebase uid). Raises ValueError if the
    token is invalid, expired, for another project, or missing sub.

    Args:
        token: ID token string (e.g. from Authorization header).
        project_id: Firebase project id (expected audience).

    Returns:
        Decoded claims dict.

    Raises:
        ValueError: If token is invalid or missing required claims.
    """
    try:
        claims = id_token.verify_firebase_token(token, _request, audience=project_id)
    except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if not claims or not claims.get("sub"):
        raise ValueError("Token missing required claim: sub")
    return claims


async def verify_firebase_id_token(token: str, project_id: str) -> dict[str, Any]:
    """Async wrapper; certificate fetch and RSA check run in a thread."""
    return await asyncio.to_thread(verify_firebase_id_token_sync, token, project_id)
