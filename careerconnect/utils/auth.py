from datetime import timedelta
from typing import Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from careerconnect.config import settings
from careerconnect.database import get_db
from careerconnect.utils.clock import utcnow

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def create_access_token(user_id, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode = {"sub": str(user_id), "exp": utcnow() + timedelta(minutes=minutes)}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


async def user_from_token(token: str) -> Optional[dict]:
    """Resolve a bearer token to its user document, or None."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if not user_id or not ObjectId.is_valid(user_id):
        return None

    return await get_db().users.find_one({"_id": ObjectId(user_id)})


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    user = await user_from_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
):
    """Like get_current_user, but anonymous callers get None instead of 401."""
    if credentials is None:
        return None
    return await user_from_token(credentials.credentials)
