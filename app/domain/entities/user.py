"""User domain entity.

A user document as consumed by the settings layer. The company anchor
("Company Admin") is a reference to the admin user's own document.
"""

from dataclasses import dataclass
from typing import Any

from app.domain.enums import UserRole
from app.domain.exceptions import ValidationException
from app.domain.value_objects.core import DocumentRef

USERS_COLLECTION = "users"


@dataclass
class UserDocument:
    """Signed-in or managed user with the company scope it belongs to."""

    uid: str
    email: str
    name: str
    role: UserRole
    company_admin: DocumentRef
    avatar: str | None = None
    is_google_sign_up: bool = False

    @property
    def ref(self) -> DocumentRef:
        return DocumentRef(USERS_COLLECTION, self.uid)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @classmethod
    def from_document(cls, uid: str, data: dict[str, Any]) -> "UserDocument":
        """Build from raw document fields.

        A user without "Company Admin" is treated as the admin of their own
        company (the self-reference written at registration).
        """
        raw_role = data.get("User Type") or UserRole.ADMIN.value
        try:
            role = UserRole(raw_role)
        except ValueError as e:
            raise ValidationException(
                f"Unknown user type: {raw_role!r}", field="User Type"
            ) from e
        company_admin = data.get("Company Admin")
        if isinstance(company_admin, str):
            company_admin = DocumentRef.from_path(company_admin)
        if not isinstance(company_admin, DocumentRef):
            company_admin = DocumentRef(USERS_COLLECTION, uid)
        return cls(
            uid=uid,
            email=data.get("email", ""),
            name=data.get("Name", ""),
            role=role,
            company_admin=company_admin,
            avatar=data.get("Avatar"),
            is_google_sign_up=bool(data.get("Is Google Sign Up", False)),
        )
