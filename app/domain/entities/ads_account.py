"""Ads account naming and membership rules."""

from collections.abc import Iterable
from typing import Any

from app.domain.value_objects.core import DocumentRef


def format_account_number(value: Any) -> str:
    """Format a numeric ads account id for display.

    Ten-digit ids use the customer-id grouping ``123-456-7890``; anything
    else is returned as its string form. None becomes an empty string.
    """
    if value is None:
        return ""
    digits = str(value).strip()
    if len(digits) == 10 and digits.isdigit():
        return f"{digits[:3]}-{digits[3:6]}-{digits[6:]}"
    return digits


def resolve_ads_account_name(data: dict[str, Any]) -> str:
    """Return the display name: editable name, then original name, then formatted id."""
    return (
        data.get("Account Name Editable")
        or data.get("Account Name Original")
        or format_account_number(data.get("Id"))
    )


def has_member(selected_users: Iterable[Any] | None, user_ref: DocumentRef) -> bool:
    """True if user_ref is present in a "Selected Users" list (direct key comparison)."""
    return any(ref == user_ref for ref in selected_users or ())
