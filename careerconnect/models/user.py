from pydantic import EmailStr
from typing import List, Literal, Optional
from .base import MongoBaseModel, PyObjectId

ROLE_JOB_SEEKER = "Job Seeker"
ROLE_EMPLOYER = "Employer"

# Fields other users may see
PUBLIC_USER_FIELDS = {"name": 1, "email": 1, "role": 1, "skills": 1, "profile_photo_path": 1}

class User(MongoBaseModel):
    name: str
    email: EmailStr
    phone: str
    password: str
    role: Literal["Job Seeker", "Employer"]
    skills: List[str] = []
    about: str = ""
    company_description: str = ""
    hiring_roles: List[str] = []
    resume_url: Optional[str] = None
    resume_original_name: Optional[str] = None
    profile_photo_path: Optional[str] = None
    connections: List[PyObjectId] = []
    quiz_completed: bool = False
    quiz_answers: List[dict] = []
    quiz_summary: dict = {}
