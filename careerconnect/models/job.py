from typing import List, Optional
from datetime import datetime
from .base import MongoBaseModel, PyObjectId

class Job(MongoBaseModel):
    posted_by: PyObjectId
    title: str
    description: str
    category: str = ""
    country: str = ""
    city: str = ""
    location: str = ""
    fixed_salary: Optional[float] = None
    salary_from: Optional[float] = None
    salary_to: Optional[float] = None
    skills: List[str]
    start_date: datetime
    end_date: datetime
    expired: bool = False
    applicants: List[PyObjectId] = []
    vacancies: int = 1
    employment_type: str = ""
    location_type: str = ""
    job_posted_on: datetime
