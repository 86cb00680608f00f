"""Invitation domain entity.

Represents a pending invite to join a company. Acceptance happens elsewhere;
this entity only fixes the shape and the expiry rule.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from app.domain.enums import InvitationStatus, UserRole
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import DocumentRef

INVITATION_TTL = timedelta(days=7)


@dataclass
class InvitationEntity:
    """Invitation with expiry fixed at creation time plus the TTL (7 days)."""

    email: str
    name: str
    role: UserRole
    ads_accounts: list[DocumentRef]
    invited_by: DocumentRef
    company_admin: DocumentRef
    created_at: datetime
    ttl: timedelta = INVITATION_TTL
    status: InvitationStatus = InvitationStatus.PENDING
    expires_at: datetime = field(init=False)

    def __post_init__(self) -> None:
        self.email = (self.email or "").strip().lower()
        if not self.email or "@" not in self.email:
            raise ValidationException("A valid email is required", field="email")
        self.expires_at = self.created_at + self.ttl

    def to_document(self) -> dict[str, Any]:
        """Fields written to the invitations collection."""
        return {
            "email": self.email,
            "Name": self.name,
            "User Type": self.role.value,
            "Ads Accounts": list(self.ads_accounts),
            "Invited By": self.invited_by,
            "Company Admin": self.company_admin,
            "Status": self.status.value,
            "Created At": self.created_at,
            "Expires At": self.expires_at,
        }
