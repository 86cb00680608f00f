"""Input sanitization for user-supplied display text (names shown in the UI and emails)."""

import re
from typing import ClassVar

import nh3


class InputSanitizer:
    """
    Strip markup from free text before it is stored.

    Names end up in email templates and in the settings UI; no HTML is
    allowed in them.
    """

    ALLOWED_TAGS: ClassVar[set[str]] = set()
    WHITESPACE_PATTERN: ClassVar[re.Pattern[str]] = re.compile(r"\s+")

    @classmethod
    def sanitize_html(cls, value: str) -> str:
        """Remove all HTML tags with nh3 (strict, no tags allowed)."""
        if not value:
            return value
        return nh3.clean(value, tags=cls.ALLOWED_TAGS, attributes={})

    @classmethod
    def sanitize_display_text(cls, value: str) -> str:
        """Strip tags and collapse runs of whitespace."""
        if not value:
            return value
        cleaned = cls.sanitize_html(value)
        return cls.WHITESPACE_PATTERN.sub(" ", cleaned).strip()


def sanitize_text(value: str | None) -> str | None:
    """Sanitize an optional display string; None passes through."""
    if value is None:
        return None
    return InputSanitizer.sanitize_display_text(value)
