"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import ensure_utc, from_timestamp_utc, sanitize_text, utc_now

__all__ = [
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "sanitize_text",
]
