"""Domain value objects for the AdAlert settings service.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

import re
from dataclasses import dataclass

# Firestore document ids: anything except "/" and not "." or "..".
_DOCUMENT_ID_RE = re.compile(r"^[^/]{1,1500}$")
_DOCUMENTS_MARKER = "/documents/"


@dataclass(frozen=True)
class DocumentRef:
    """Normalized reference to a document: collection name plus document id.

    Two references are equal only when both collection and id are equal.
    Membership checks (e.g. "Selected Users") compare DocumentRef values
    directly; paths are never compared by substring.
    """

    collection: str
    id: str

    def __post_init__(self) -> None:
        if not self.collection or "/" in self.collection:
            raise ValueError(f"Invalid collection name: {self.collection!r}")
        if not _DOCUMENT_ID_RE.match(self.id) or self.id in (".", ".."):
            raise ValueError(f"Invalid document id: {self.id!r}")

    @property
    def path(self) -> str:
        """Relative document path, e.g. ``users/abc``."""
        return f"{self.collection}/{self.id}"

    @classmethod
    def from_path(cls, path: str) -> "DocumentRef":
        """Parse ``users/abc``, ``/users/abc`` or a full Firestore resource name.

        Raises:
            ValueError: If the path does not end in ``<collection>/<id>``.
        """
        raw = (path or "").strip()
        if _DOCUMENTS_MARKER in raw:
            raw = raw.split(_DOCUMENTS_MARKER, 1)[1]
        parts = [p for p in raw.split("/") if p]
        if len(parts) < 2 or len(parts) % 2:
            raise ValueError(f"Not a document path: {path!r}")
        return cls(parts[-2], parts[-1])

    def __str__(self) -> str:
        return self.path

    @classmethod
    def coerce(cls, value: "DocumentRef | str") -> "DocumentRef":
        """Return value unchanged if already a reference, else parse it as a path."""
        if isinstance(value, cls):
            return value
        return cls.from_path(value)
