# ========================================
# careerconnect/schemas/application.py
# ========================================

from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime

# 1. Input: Update Status (Employer)
class ApplicationStatusUpdate(BaseModel):
    status: Literal["submitted", "reviewing", "shortlisted", "rejected", "hired"]

# 2. Output: Pieces
class PartyResponse(BaseModel):
    user: str
    role: str

class ResumeResponse(BaseModel):
    url: str
    original_name: Optional[str] = None

# 3. Output: Application
class ApplicationResponse(BaseModel):
    id: str
    job: str
    applicant_id: PartyResponse
    employer_id: PartyResponse
    name: str
    email: str
    phone: str
    address: str = ""
    cover_letter: str = ""
    resume: ResumeResponse
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: List[ApplicationResponse]

class ApplicationEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    application: ApplicationResponse
