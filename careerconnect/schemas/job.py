# ========================================
# careerconnect/schemas/job.py
# ========================================

from pydantic import BaseModel, Field
from typing import List, Optional, Union
from datetime import datetime

# 1. Input: What the Employer sends
class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=30, max_length=5000)
    category: str
    country: str
    city: str
    location: str
    fixed_salary: Optional[float] = None
    salary_from: Optional[float] = None
    salary_to: Optional[float] = None
    skills: Union[List[str], str] = []  # array or comma-separated string
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    vacancies: Optional[int] = Field(None, ge=1)
    employment_type: Optional[str] = None  # Full-time, Part-time, Contract
    location_type: Optional[str] = None  # Remote, Onsite, Hybrid

# 2. Input: Update existing job
class JobUpdate(BaseModel):
    """Schema for updating job details"""
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=30, max_length=5000)
    category: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    location: Optional[str] = None
    fixed_salary: Optional[float] = None
    salary_from: Optional[float] = None
    salary_to: Optional[float] = None
    skills: Optional[Union[List[str], str]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    vacancies: Optional[int] = Field(None, ge=1)
    employment_type: Optional[str] = None
    location_type: Optional[str] = None

# 3. Output: Job as stored
class JobResponse(BaseModel):
    id: str
    posted_by: str
    title: str
    description: str
    category: str = ""
    country: str = ""
    city: str = ""
    location: str = ""
    fixed_salary: Optional[float] = None
    salary_from: Optional[float] = None
    salary_to: Optional[float] = None
    skills: List[str] = []
    start_date: datetime
    end_date: datetime
    expired: bool = False
    applicants: List[str] = []
    vacancies: int = 1
    employment_type: str = ""
    location_type: str = ""
    job_posted_on: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class JobListResponse(BaseModel):
    success: bool = True
    jobs: List[JobResponse]

class JobEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    job: JobResponse
