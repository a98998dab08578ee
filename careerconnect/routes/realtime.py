# ========================================
# careerconnect/routes/realtime.py
# ========================================

import structlog
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from careerconnect.realtime import get_manager
from careerconnect.utils.auth import user_from_token

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Realtime"])


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, token: str = Query("")):
    """
    Live events. Connect with ``?token=<jwt>`` and announce yourself once:
    ``{"event": "register", "user_id": "<your id>"}``. Events then arrive as
    ``{"event": ..., "data": ...}``.
    """
    user = await user_from_token(token) if token else None
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    manager = get_manager()
    user_id = str(user["_id"])
    registered = False

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.info("socket_frame_ignored", user_id=user_id)
                continue
            if not isinstance(message, dict) or message.get("event") != "register" or registered:
                continue

            if str(message.get("user_id")) != user_id:
                await websocket.send_json({"event": "error", "data": {"message": "User id does not match token"}})
                continue

            manager.join(user_id, websocket)
            registered = True
            await websocket.send_json({"event": "registered", "data": {"user_id": user_id}})
    except WebSocketDisconnect:
        pass
    finally:
        manager.leave(websocket)
        logger.info("socket_closed", user_id=user_id)
