"""DTOs for user use cases."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AvatarUpload:
    """Avatar image bytes received from the client."""

    content: bytes
    content_type: str
    filename: str = "avatar"


@dataclass(frozen=True)
class UserUpdate:
    """Partial update of a user document.

    None means "leave unchanged". current_avatar_url is the address stored
    before this update and is the one removed after a new upload.
    """

    name: str | None = None
    role: str | None = None
    avatar: AvatarUpload | None = None
    current_avatar_url: str | None = None

    def fields(self) -> dict[str, str]:
        """Document fields written by this update (avatar excluded)."""
        out: dict[str, str] = {}
        if self.name is not None:
            out["Name"] = self.name
        if self.role is not None:
            out["User Type"] = self.role
        return out
