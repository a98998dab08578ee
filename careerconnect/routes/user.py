# ========================================
# careerconnect/routes/user.py
# ========================================

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from careerconnect.routes.files import store_upload
from careerconnect.schemas.user import (
    PersonResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserProfileUpdate,
    UserResponse,
)
from careerconnect.services import users as user_service
from careerconnect.utils.auth import create_access_token, get_current_user
from careerconnect.utils.serialize import serialize_doc, serialize_docs

router = APIRouter(prefix="/api/v1/user", tags=["Users"])
people_router = APIRouter(prefix="/api/v1/people", tags=["People"])

RESUME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. REGISTER
@router.post("/register", response_model=TokenResponse, status_code=201)
async def register_user(user: UserCreate):
    """Register a new Job Seeker or Employer and log them in."""
    created = await user_service.register_user(user.model_dump())
    return {
        "message": "User Registered Successfully !",
        "access_token": create_access_token(created["_id"]),
        "user": serialize_doc(created),
    }


# ✅ 2. LOGIN
@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin):
    """Login and get JWT access token."""
    user = await user_service.authenticate(credentials.email, credentials.password, credentials.role)
    return {
        "message": "User Logged In Successfully !",
        "access_token": create_access_token(user["_id"]),
        "user": serialize_doc(user),
    }


# ===========================
# AUTHENTICATED USER ENDPOINTS
# ===========================

# ✅ 3. GET MY PROFILE
@router.get("/me", response_model=UserResponse)
async def get_profile(current_user: dict = Depends(get_current_user)):
    return serialize_doc(current_user)


# ✅ 4. UPDATE MY PROFILE
@router.put("/me", response_model=UserResponse)
async def update_profile(profile_data: UserProfileUpdate, current_user: dict = Depends(get_current_user)):
    user = await user_service.update_profile(current_user, profile_data.model_dump(exclude_unset=True))
    return serialize_doc(user)


# ✅ 5. UPLOAD RESUME
@router.post("/upload/resume", response_model=UserResponse)
async def upload_resume(file: UploadFile = File(...), current_user: dict = Depends(get_current_user)):
    """Store a resume; it becomes the default for future applications."""
    if file.content_type not in RESUME_TYPES:
        raise HTTPException(status_code=400, detail="Resume must be PDF or DOC/DOCX")

    url = await store_upload("resumes", file, current_user)
    user = await user_service.set_resume(current_user, url, file.filename)
    return serialize_doc(user)


# ✅ 6. UPLOAD PROFILE PHOTO
@router.post("/upload/photo", response_model=UserResponse)
async def upload_photo(file: UploadFile = File(...), current_user: dict = Depends(get_current_user)):
    if not (file.content_type or "").startswith("image/"):
        raise HTTPException(status_code=400, detail="Only images allowed for photo")

    path = await store_upload("profile_photos", file, current_user)
    user = await user_service.set_profile_photo(current_user, path)
    return serialize_doc(user)


# ===========================
# PEOPLE
# ===========================

@people_router.get("", response_model=List[PersonResponse])
async def list_people(current_user: dict = Depends(get_current_user)):
    """Everyone else on the platform, newest first."""
    people = await user_service.list_people(exclude_user=current_user["_id"])
    return serialize_docs(people)
