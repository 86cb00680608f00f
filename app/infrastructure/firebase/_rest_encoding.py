"""Encode/decode Python values to/from Firestore REST API 'fields' format.

Document references travel as ``referenceValue`` (full resource name) and
come back as DocumentRef. ``root`` is the ``projects/<p>/databases/(default)/documents``
prefix of the database the value is written to.
"""

import base64
import re
from datetime import datetime
from typing import Any

from app.domain.value_objects.core import DocumentRef
from app.shared.utils.datetime import ensure_utc

_SIMPLE_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def quote_field_path(field: str) -> str:
    """Return a Firestore field path; names with spaces or symbols are back-tick quoted."""
    if _SIMPLE_FIELD_RE.match(field):
        return field
    escaped = field.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def _encode_value(v: Any, root: str = "") -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": ensure_utc(v).strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, DocumentRef):
        return {"referenceValue": f"{root}/{v.path}" if root else v.path}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(x, root) for x in v]}}
    if isinstance(v, dict):
        return {
            "mapValue": {"fields": {k: _encode_value(x, root) for k, x in v.items()}}
        }
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def encode_document(data: dict[str, Any], root: str = "") -> dict:
    """Convert a Python dict to Firestore REST Document.fields format."""
    return {"fields": {k: _encode_value(v, root) for k, v in data.items()}}


def _decode_value(obj: dict) -> Any:
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return obj["doubleValue"]
    if "timestampValue" in obj:
        return datetime.fromisoformat(obj["timestampValue"].replace("Z", "+00:00"))
    if "stringValue" in obj:
        return obj["stringValue"]
    if "referenceValue" in obj:
        return DocumentRef.from_path(obj["referenceValue"])
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "arrayValue" in obj:
        vals = obj.get("arrayValue", {}).get("values") or []
        return [_decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = obj["mapValue"].get("fields") or {}
        return {k: _decode_value(x) for k, x in fields.items()}
    return None


def decode_document(document: dict | None) -> dict:
    """Convert a Firestore REST Document (``{"name", "fields", ...}``) to a Python dict."""
    if not document:
        return {}
    return {k: _decode_value(v) for k, v in (document.get("fields") or {}).items()}
