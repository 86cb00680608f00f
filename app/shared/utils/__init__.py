"""Shared utilities: datetime and sanitization."""

from app.shared.utils.datetime import ensure_utc, from_timestamp_utc, utc_now
from app.shared.utils.sanitization import InputSanitizer, sanitize_text

__all__ = [
    "utc_now",
    "ensure_utc",
    "from_timestamp_utc",
    "InputSanitizer",
    "sanitize_text",
]
