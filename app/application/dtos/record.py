"""DTOs exchanged with the record store (no Firestore dependency)."""

from dataclasses import dataclass, field
from typing import Any, Literal

from app.domain.value_objects.core import DocumentRef

FilterOp = Literal["==", "array-contains"]


@dataclass(frozen=True)
class FieldFilter:
    """Equality or array-containment predicate on one field."""

    field: str
    op: FilterOp
    value: Any


@dataclass
class Record:
    """A document read from the store: its reference and raw fields."""

    ref: DocumentRef
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.ref.id

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)
