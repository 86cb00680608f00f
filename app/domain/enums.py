"""Domain enumerations for the AdAlert settings service.

Enums represent fixed sets of domain values stored verbatim in documents
(e.g. "User Type" is "Admin" or "Manager").
"""

from enum import Enum


class UserRole(str, Enum):
    """Access level of a user inside a company.

    Admins see every connected ads account implicitly; Managers see only the
    accounts whose "Selected Users" reference them.
    """

    ADMIN = "Admin"
    MANAGER = "Manager"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid role values as strings."""
        return [role.value for role in cls]


class InvitationStatus(str, Enum):
    """Lifecycle of an invitation document."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    EXPIRED = "Expired"


class SubscriptionStatus(str, Enum):
    """Status written on the subscription mirror document."""

    NOT_PAYING = "Not Paying"
    PAYING = "Paying"
