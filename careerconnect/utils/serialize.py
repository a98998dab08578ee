"""
Helpers for turning MongoDB documents into JSON friendly dicts.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return serialize_doc(value)
    if isinstance(value, (list, tuple, set)):
        return [serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Convert ``_id`` to ``id`` and every ObjectId/datetime inside to text."""
    if doc is None:
        return None

    result = {}
    for key, value in doc.items():
        if key == "_id":
            result["id"] = serialize_value(value)
        elif key == "password":
            continue
        else:
            result[key] = serialize_value(value)
    return result


def serialize_docs(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [serialize_doc(d) for d in docs]
