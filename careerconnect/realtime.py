"""
Live event fan-out over WebSockets.

Each socket joins a room named after its user id. Emitting to a user sends
to every socket in that room; an empty room drops the event. Nothing is
queued, the persisted records are the durable path.
"""

from collections import defaultdict
from typing import Any, Dict, Set

import structlog
from fastapi import WebSocket

from careerconnect.utils.serialize import serialize_value

logger = structlog.get_logger(__name__)


class ConnectionManager:
    def __init__(self):
        self.rooms: Dict[str, Set[WebSocket]] = defaultdict(set)

    def join(self, user_id, websocket: WebSocket) -> None:
        self.rooms[str(user_id)].add(websocket)
        logger.info("socket_registered", user_id=str(user_id), sockets=len(self.rooms[str(user_id)]))

    def leave(self, websocket: WebSocket) -> None:
        for user_id in list(self.rooms):
            sockets = self.rooms[user_id]
            sockets.discard(websocket)
            if not sockets:
                del self.rooms[user_id]

    def is_online(self, user_id) -> bool:
        return bool(self.rooms.get(str(user_id)))

    async def emit(self, user_id, event: str, data: Any) -> int:
        """Send ``{"event", "data"}`` to every socket of ``user_id``.

        Returns how many sockets received it.
        """
        sockets = list(self.rooms.get(str(user_id), ()))
        if not sockets:
            return 0

        message = {"event": event, "data": serialize_value(data)}
        delivered = 0
        for websocket in sockets:
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("socket_send_failed", user_id=str(user_id), event_name=event, error=str(e))
                self.leave(websocket)
        return delivered


manager = ConnectionManager()


def get_manager() -> ConnectionManager:
    return manager
