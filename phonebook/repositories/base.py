"""Helpers shared by the MongoDB repositories."""

from __future__ import annotations

from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Convert a string identifier to an ObjectId; malformed values yield None."""

    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def stringify_id(document: Dict[str, Any]) -> Dict[str, Any]:
    """Rename `_id` to `id` and render ObjectIds as strings."""

    decoded = {key: value for key, value in document.items() if key != "_id"}
    decoded["id"] = str(document["_id"])
    for key, value in decoded.items():
        if isinstance(value, ObjectId):
            decoded[key] = str(value)
        elif isinstance(value, list):
            decoded[key] = [str(item) if isinstance(item, ObjectId) else item for item in value]
    return decoded
