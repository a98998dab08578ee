"""
User accounts, profiles and the role guard shared by the other services.
"""

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError

from careerconnect.database import as_object_id, get_db
from careerconnect.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from careerconnect.models.user import PUBLIC_USER_FIELDS, User
from careerconnect.services.matching import split_skills
from careerconnect.utils.clock import utcnow
from careerconnect.utils.security import get_password_hash, verify_password

logger = structlog.get_logger(__name__)

PROFILE_FIELDS = ("name", "about", "skills", "company_description", "hiring_roles")
LOCKED_FIELDS = ("email", "phone")


def require_role(user: Dict[str, Any], role: str, message: str) -> None:
    if user.get("role") != role:
        raise AuthorizationError(message)


async def get_user(user_id) -> Dict[str, Any]:
    oid = as_object_id(user_id)
    user = await get_db().users.find_one({"_id": oid}) if oid else None
    if not user:
        raise NotFoundError("User not found")
    return user


async def public_profiles(user_ids) -> Dict[str, Dict[str, Any]]:
    """Public fields of several users keyed by their id string."""
    ids = [oid for oid in (as_object_id(u) for u in user_ids) if oid]
    if not ids:
        return {}
    users = await get_db().users.find({"_id": {"$in": ids}}, PUBLIC_USER_FIELDS).to_list(len(ids))
    return {str(u["_id"]): u for u in users}


async def register_user(data: Dict[str, Any]) -> Dict[str, Any]:
    """Create an account. ``data`` holds name, email, phone, password, role."""
    db = get_db()

    missing = [k for k in ("name", "email", "phone", "password", "role") if not data.get(k)]
    if missing:
        raise ValidationError("Please fill full form !")

    if await db.users.find_one({"email": data["email"]}):
        raise ConflictError("Email already registered !")

    try:
        user = User(**{**data, "password": get_password_hash(data["password"])})
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"])

    doc = user.to_document()
    try:
        result = await db.users.insert_one(doc)
    except DuplicateKeyError:
        raise ConflictError("Email already registered !")

    doc["_id"] = result.inserted_id
    logger.info("user_registered", user_id=str(result.inserted_id), role=data["role"])
    return doc


async def authenticate(email: str, password: str, role: str) -> Dict[str, Any]:
    if not email or not password or not role:
        raise ValidationError("Please provide email ,password and role !")

    user = await get_db().users.find_one({"email": email})
    if not user or not verify_password(password, user["password"]):
        raise ValidationError("Invalid Email Or Password.")

    if user["role"] != role:
        raise NotFoundError(f"User with provided email and {role} not found !")

    return user


async def update_profile(user: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    if any(k in changes for k in LOCKED_FIELDS):
        raise ValidationError("Email/Phone cannot be edited.")

    updates = {k: v for k, v in changes.items() if k in PROFILE_FIELDS and v is not None}
    if "skills" in updates:
        updates["skills"] = split_skills(updates["skills"])
    if "hiring_roles" in updates:
        updates["hiring_roles"] = split_skills(updates["hiring_roles"])

    if updates:
        updates["updated_at"] = utcnow()
        await get_db().users.update_one({"_id": user["_id"]}, {"$set": updates})

    return await get_user(user["_id"])


async def set_resume(user: Dict[str, Any], url: str, original_name: Optional[str]) -> Dict[str, Any]:
    await get_db().users.update_one(
        {"_id": user["_id"]},
        {"$set": {"resume_url": url, "resume_original_name": original_name, "updated_at": utcnow()}},
    )
    return await get_user(user["_id"])


async def set_profile_photo(user: Dict[str, Any], path: str) -> Dict[str, Any]:
    await get_db().users.update_one(
        {"_id": user["_id"]},
        {"$set": {"profile_photo_path": path, "updated_at": utcnow()}},
    )
    return await get_user(user["_id"])


async def list_people(exclude_user=None, limit: int = 500) -> List[Dict[str, Any]]:
    query = {}
    if exclude_user is not None:
        query["_id"] = {"$ne": exclude_user}
    projection = {"name": 1, "role": 1, "skills": 1, "profile_photo_path": 1, "created_at": 1}
    return await get_db().users.find(query, projection).sort("created_at", -1).to_list(limit)
