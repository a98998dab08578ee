"""
Chat between connected users: persisted history plus live delivery.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from careerconnect.config import settings
from careerconnect.database import as_object_id, get_db
from careerconnect.errors import AuthorizationError, ValidationError
from careerconnect.models.message import Message
from careerconnect.realtime import get_manager
from careerconnect.services.connections import are_connected
from careerconnect.utils.clock import to_naive_utc

logger = structlog.get_logger(__name__)


def _conversation(a, b) -> Dict[str, Any]:
    return {
        "$or": [
            {"sender": a, "receiver": b},
            {"sender": b, "receiver": a},
        ]
    }


def clamp_limit(limit: Optional[int]) -> int:
    if not limit:
        return settings.MESSAGE_PAGE_DEFAULT
    return max(1, min(int(limit), settings.MESSAGE_PAGE_MAX))


async def _require_connection(me, other, message: str):
    other_oid = as_object_id(other)
    if other_oid is None or not await are_connected(me, other_oid):
        raise AuthorizationError(message)
    return other_oid


async def list_messages(
    user: Dict[str, Any],
    other_id,
    limit: Optional[int] = None,
    before: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Newest ``limit`` messages (optionally older than ``before``), oldest first."""
    me = user["_id"]
    other = await _require_connection(me, other_id, "You must be connected to view messages.")

    query = _conversation(me, other)
    if before is not None:
        query["created_at"] = {"$lt": to_naive_utc(before)}

    limit = clamp_limit(limit)
    messages = await get_db().messages.find(query).sort(
        [("created_at", -1), ("_id", -1)]
    ).limit(limit).to_list(limit)
    messages.reverse()
    return messages


async def send_message(user: Dict[str, Any], other_id, content: str) -> Dict[str, Any]:
    me = user["_id"]
    other = await _require_connection(me, other_id, "You must be connected to chat.")

    if not content or not str(content).strip():
        raise ValidationError("Message content required.")

    doc = Message(sender=me, receiver=other, content=str(content)).to_document()
    result = await get_db().messages.insert_one(doc)
    doc["_id"] = result.inserted_id

    payload = {
        "id": doc["_id"],
        "from": me,
        "to": other,
        "content": doc["content"],
        "created_at": doc["created_at"],
    }
    manager = get_manager()
    await manager.emit(other, "receive-message", payload)
    # Echo so the sender's other tabs see the server id and timestamp
    await manager.emit(me, "message-sent", payload)

    logger.info("message_sent", message_id=str(doc["_id"]))
    return doc


async def mark_read(user: Dict[str, Any], other_id) -> int:
    me = user["_id"]
    other = await _require_connection(me, other_id, "You must be connected to view messages.")
    result = await get_db().messages.update_many(
        {"sender": other, "receiver": me, "read": False}, {"$set": {"read": True}}
    )
    return result.modified_count
