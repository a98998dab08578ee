"""
Connection graph between users.

One document per unordered pair. Lifecycle::

    pending -> accepted
    pending -> declined -> pending (re-requested by the other side) -> ...

Only the recipient answers a request. Accepting unlocks chat.
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from pymongo.errors import DuplicateKeyError

from careerconnect.database import as_object_id, get_db
from careerconnect.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from careerconnect.models.connection import CONNECTION_ACTIONS, Connection, pair_key
from careerconnect.realtime import get_manager
from careerconnect.services.users import public_profiles
from careerconnect.utils.clock import utcnow

logger = structlog.get_logger(__name__)


async def find_pair(a, b) -> Optional[Dict[str, Any]]:
    return await get_db().connections.find_one({"pair": pair_key(a, b)})


async def status_between(a, b) -> Optional[Dict[str, Any]]:
    """The pair's connection in either direction, or None."""
    a, b = as_object_id(a), as_object_id(b)
    if not a or not b:
        return None
    return await find_pair(a, b)


async def are_connected(a, b) -> bool:
    connection = await status_between(a, b)
    return bool(connection) and connection["status"] == "accepted"


async def _notify_request(connection: Dict[str, Any]) -> None:
    await get_manager().emit(
        connection["recipient"],
        "connection-request",
        {
            "from": connection["requester"],
            "connection": {
                "id": connection["_id"],
                "requester": connection["requester"],
                "recipient": connection["recipient"],
                "status": connection["status"],
            },
        },
    )


async def request_connection(requester: Dict[str, Any], recipient_id) -> Tuple[Dict[str, Any], str]:
    """Returns ``(connection, message)``; message says what happened."""
    db = get_db()
    requester_id = requester["_id"]

    recipient_oid = as_object_id(recipient_id)
    if recipient_oid is None:
        raise ValidationError("Invalid recipient id")
    if recipient_oid == requester_id:
        raise ConflictError("Cannot send request to yourself")
    if not await db.users.find_one({"_id": recipient_oid}, {"_id": 1}):
        raise NotFoundError("Recipient user not found")

    existing = await find_pair(requester_id, recipient_oid)
    if existing:
        # A declined request may be re-opened by the side that declined it
        if existing["status"] == "declined" and existing["requester"] != requester_id:
            await db.connections.update_one(
                {"_id": existing["_id"]},
                {"$set": {
                    "requester": requester_id,
                    "recipient": recipient_oid,
                    "pair": pair_key(requester_id, recipient_oid),
                    "status": "pending",
                    "updated_at": utcnow(),
                }},
            )
            revived = await db.connections.find_one({"_id": existing["_id"]})
            logger.info("connection_revived", connection_id=str(revived["_id"]))
            await _notify_request(revived)
            return revived, "Request re-sent"

        return existing, "Connection already exists"

    doc = Connection(requester=requester_id, recipient=recipient_oid).to_document()
    try:
        result = await db.connections.insert_one(doc)
    except DuplicateKeyError:
        # Lost a race with an identical request
        existing = await find_pair(requester_id, recipient_oid)
        return existing, "Connection already exists"
    doc["_id"] = result.inserted_id

    logger.info("connection_requested", connection_id=str(doc["_id"]))
    await _notify_request(doc)
    return doc, "Request sent"


async def list_incoming(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    requests = await get_db().connections.find(
        {"recipient": user["_id"], "status": "pending"}
    ).sort([("created_at", -1), ("_id", -1)]).to_list(None)

    profiles = await public_profiles(r["requester"] for r in requests)
    for request in requests:
        request["requester"] = profiles.get(str(request["requester"]), {"_id": request["requester"]})
    return requests


async def find_connection(connection_id) -> Dict[str, Any]:
    oid = as_object_id(connection_id)
    connection = await get_db().connections.find_one({"_id": oid}) if oid else None
    if not connection:
        raise NotFoundError("Request not found")
    return connection


async def respond(connection_id, user: Dict[str, Any], action: str) -> Dict[str, Any]:
    if action not in CONNECTION_ACTIONS:
        raise ValidationError("Invalid action")

    db = get_db()
    connection = await find_connection(connection_id)
    if connection["recipient"] != user["_id"]:
        raise AuthorizationError("Not authorized to respond to this request")
    if connection["status"] != "pending":
        raise ConflictError(f"Request already {connection['status']}")

    status = CONNECTION_ACTIONS[action]
    await db.connections.update_one(
        {"_id": connection["_id"]}, {"$set": {"status": status, "updated_at": utcnow()}}
    )
    connection = await find_connection(connection["_id"])

    if status == "accepted":
        await db.users.update_one({"_id": connection["requester"]}, {"$addToSet": {"connections": connection["recipient"]}})
        await db.users.update_one({"_id": connection["recipient"]}, {"$addToSet": {"connections": connection["requester"]}})

    logger.info("connection_responded", connection_id=str(connection["_id"]), status=status)

    manager = get_manager()
    for party in (connection["requester"], connection["recipient"]):
        await manager.emit(party, "connection-responded", {"action": action, "connection": connection})
    return connection


async def list_accepted(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    me = user["_id"]
    connections = await get_db().connections.find(
        {"status": "accepted", "$or": [{"requester": me}, {"recipient": me}]}
    ).sort([("updated_at", -1), ("_id", -1)]).to_list(None)

    others = [c["recipient"] if c["requester"] == me else c["requester"] for c in connections]
    manager = get_manager()
    profiles = await public_profiles(others)
    for connection, other in zip(connections, others):
        connection["other"] = profiles.get(str(other), {"_id": other})
        connection["online"] = manager.is_online(other)
    return connections
