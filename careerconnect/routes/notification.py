# ========================================
# careerconnect/routes/notification.py
# ========================================

from fastapi import APIRouter, Depends, Query

from careerconnect.schemas.notification import NotificationMarkRead
from careerconnect.services import notifications as notification_service
from careerconnect.utils.auth import get_current_user
from careerconnect.utils.serialize import serialize_docs

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])


@router.get("")
async def get_notifications(
    unreadOnly: bool = Query(False),
    current_user: dict = Depends(get_current_user),
):
    feed = await notification_service.list_notifications(current_user, unread_only=unreadOnly)
    return {
        "success": True,
        "notifications": serialize_docs(feed["notifications"]),
        "unreadCount": feed["unread_count"],
    }


@router.post("/mark-read")
async def mark_notifications_read(body: NotificationMarkRead, current_user: dict = Depends(get_current_user)):
    count = await notification_service.mark_read(current_user, ids=body.ids, all_=body.all)
    return {"success": True, "message": "Marked read", "marked": count}
