from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional, List, Union
from datetime import datetime

# 1. For Registration (Input)
class UserCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=30)
    email: EmailStr
    phone: str
    password: str = Field(..., min_length=8, max_length=32)
    role: Literal["Job Seeker", "Employer"]

# 2. For Login (Input)
class UserLogin(BaseModel):
    email: str
    password: str
    role: Literal["Job Seeker", "Employer"]

# 3. For Responses (Output)
class UserResponse(BaseModel):
    id: str
    name: str
    email: EmailStr
    role: str
    phone: Optional[str] = None
    # A new user might not have these yet
    skills: List[str] = []
    about: str = ""
    company_description: str = ""
    hiring_roles: List[str] = []
    resume_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    profile_photo_path: Optional[str] = None
    connections: List[str] = []
    quiz_completed: bool = False
    quiz_summary: dict = {}
    created_at: Optional[datetime] = None

class TokenResponse(BaseModel):
    success: bool = True
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

# 4. For Updating Profile (Input)
class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=30)
    about: Optional[str] = None
    skills: Optional[Union[List[str], str]] = None
    company_description: Optional[str] = None
    hiring_roles: Optional[Union[List[str], str]] = None
    # Present only so they can be rejected with a clear message
    email: Optional[str] = None
    phone: Optional[str] = None

# 5. People listing
class PersonResponse(BaseModel):
    id: str
    name: str
    role: str
    skills: List[str] = []
    profile_photo_path: Optional[str] = None
    created_at: Optional[datetime] = None
