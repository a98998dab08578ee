"""
Persisted notification feed with a live copy pushed to the user's room.
"""

from typing import Any, Dict, List, Optional

import structlog

from careerconnect.database import as_object_id, get_db
from careerconnect.errors import ValidationError
from careerconnect.models.notification import Notification
from careerconnect.realtime import get_manager

logger = structlog.get_logger(__name__)

FEED_LIMIT = 100


async def create_notification(user_id, title: str, body: str = "", meta: Optional[dict] = None) -> Dict[str, Any]:
    notification = Notification(user=user_id, title=title or "Notification", body=body or "", meta=meta or {})
    doc = notification.to_document()
    result = await get_db().notifications.insert_one(doc)
    doc["_id"] = result.inserted_id

    await get_manager().emit(
        user_id,
        "notification",
        {
            "id": doc["_id"],
            "title": doc["title"],
            "body": doc["body"],
            "meta": doc["meta"],
            "created_at": doc["created_at"],
        },
    )
    return doc


async def list_notifications(user: Dict[str, Any], unread_only: bool = False) -> Dict[str, Any]:
    db = get_db()
    query = {"user": user["_id"]}
    if unread_only:
        query["read"] = False

    items = await db.notifications.find(query).sort([("created_at", -1), ("_id", -1)]).to_list(FEED_LIMIT)
    unread_count = await db.notifications.count_documents({"user": user["_id"], "read": False})
    return {"notifications": items, "unread_count": unread_count}


async def mark_read(user: Dict[str, Any], ids: Optional[List[str]] = None, all_: bool = False) -> int:
    db = get_db()

    if all_:
        result = await db.notifications.update_many(
            {"user": user["_id"], "read": False}, {"$set": {"read": True}}
        )
        return result.modified_count

    object_ids = [oid for oid in (as_object_id(i) for i in ids or []) if oid]
    if not object_ids:
        raise ValidationError("No ids provided")

    result = await db.notifications.update_many(
        {"_id": {"$in": object_ids}, "user": user["_id"]}, {"$set": {"read": True}}
    )
    logger.info("notifications_read", user_id=str(user["_id"]), count=result.modified_count)
    return result.modified_count
