"""Domain value objects and shared value types."""

from app.domain.value_objects.core import DocumentRef

__all__ = [
    "DocumentRef",
]
