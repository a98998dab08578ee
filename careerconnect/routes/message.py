# ========================================
# careerconnect/routes/message.py
# ========================================

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerconnect.schemas.message import MessageCreate
from careerconnect.services import messages as message_service
from careerconnect.utils.auth import get_current_user
from careerconnect.utils.serialize import serialize_doc, serialize_docs

router = APIRouter(prefix="/api/v1/messages", tags=["Messages"])


# ✅ 1. CONVERSATION WITH :other_id (oldest first, page backwards with ?before=)
@router.get("/{other_id}")
async def list_messages(
    other_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Page size, capped at 200"),
    before: Optional[datetime] = Query(None, description="Only messages created before this time"),
    current_user: dict = Depends(get_current_user),
):
    messages = await message_service.list_messages(current_user, other_id, limit=limit, before=before)
    return {"success": True, "messages": serialize_docs(messages)}


# ✅ 2. SEND TO :other_id
@router.post("/{other_id}", status_code=201)
async def send_message(other_id: str, body: MessageCreate, current_user: dict = Depends(get_current_user)):
    message = await message_service.send_message(current_user, other_id, body.content)
    return {"success": True, "message": serialize_doc(message)}


# ✅ 3. MARK CONVERSATION READ
@router.put("/{other_id}/read")
async def mark_read(other_id: str, current_user: dict = Depends(get_current_user)):
    count = await message_service.mark_read(current_user, other_id)
    return {"success": True, "marked": count}
