"""Helpers for returning raw documents from the API."""

from typing import Any

from app.domain.value_objects.core import DocumentRef


def jsonable_document(value: Any) -> Any:
    """Replace document references with their paths, recursively."""
    if isinstance(value, DocumentRef):
        return value.path
    if isinstance(value, dict):
        return {k: jsonable_document(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [jsonable_document(v) for v in value]
    return value
