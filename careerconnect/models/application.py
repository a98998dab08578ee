from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict
from .base import MongoBaseModel, PyObjectId
from .user import ROLE_EMPLOYER, ROLE_JOB_SEEKER

APPLICATION_STATUSES = ("submitted", "reviewing", "shortlisted", "rejected", "hired")

class PartyRef(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    user: PyObjectId
    role: str

class ResumeRef(BaseModel):
    url: str
    original_name: Optional[str] = None

class Application(MongoBaseModel):
    job: PyObjectId
    applicant_id: PartyRef
    employer_id: PartyRef
    name: str
    email: str
    phone: str
    address: str = ""
    cover_letter: str = ""
    resume: ResumeRef
    status: Literal["submitted", "reviewing", "shortlisted", "rejected", "hired"] = "submitted"

    @classmethod
    def for_job(cls, job: dict, applicant_id, **fields) -> "Application":
        return cls(
            job=job["_id"],
            applicant_id=PartyRef(user=applicant_id, role=ROLE_JOB_SEEKER),
            employer_id=PartyRef(user=job["posted_by"], role=ROLE_EMPLOYER),
            **fields,
        )
