# ========================================
# careerconnect/routes/connection.py
# ========================================

from fastapi import APIRouter, Depends

from careerconnect.schemas.connection import ConnectionRespond
from careerconnect.services import connections as connection_service
from careerconnect.utils.auth import get_current_user
from careerconnect.utils.serialize import serialize_doc, serialize_docs

router = APIRouter(prefix="/api/v1/connections", tags=["Connections"])


# ✅ 1. SEND A REQUEST TO USER :recipient_id
@router.post("/request/{recipient_id}")
async def send_request(recipient_id: str, current_user: dict = Depends(get_current_user)):
    connection, message = await connection_service.request_connection(current_user, recipient_id)
    return {"success": True, "message": message, "connection": serialize_doc(connection)}


# ✅ 2. INCOMING PENDING REQUESTS
@router.get("/requests")
async def list_requests(current_user: dict = Depends(get_current_user)):
    requests = await connection_service.list_incoming(current_user)
    return {"success": True, "requests": serialize_docs(requests)}


# ✅ 3. ACCEPT / DECLINE
@router.put("/respond/{connection_id}")
async def respond_request(
    connection_id: str,
    body: ConnectionRespond,
    current_user: dict = Depends(get_current_user),
):
    connection = await connection_service.respond(connection_id, current_user, body.action)
    return {"success": True, "connection": serialize_doc(connection)}


# ✅ 4. STATUS WITH ANOTHER USER
@router.get("/status/{other_id}")
async def get_status(other_id: str, current_user: dict = Depends(get_current_user)):
    connection = await connection_service.status_between(current_user["_id"], other_id)
    return {"success": True, "connection": serialize_doc(connection)}


# ✅ 5. MY ACCEPTED CONNECTIONS
@router.get("/me")
async def my_connections(current_user: dict = Depends(get_current_user)):
    connections = await connection_service.list_accepted(current_user)
    return {"success": True, "connections": serialize_docs(connections)}
