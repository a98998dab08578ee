# ========================================
# careerconnect/routes/job.py
# ========================================

from typing import Optional

from fastapi import APIRouter, Depends, Query

from careerconnect.models.user import ROLE_JOB_SEEKER
from careerconnect.schemas.job import JobCreate, JobEnvelope, JobListResponse, JobUpdate
from careerconnect.services import jobs as job_service
from careerconnect.services.matching import split_skills
from careerconnect.utils.auth import get_current_user, get_optional_user
from careerconnect.utils.serialize import serialize_doc, serialize_docs

router = APIRouter(prefix="/api/v1/job", tags=["Jobs"])

# ===========================
# PUBLIC ENDPOINTS
# ===========================

# ✅ 1. GET ACTIVE JOBS MATCHING SKILLS (Public, personalised when logged in)
@router.get("/getall", response_model=JobListResponse)
async def get_all_jobs(
    skills: Optional[str] = Query(None, description="Filter by skills (comma-separated)"),
    current_user: Optional[dict] = Depends(get_optional_user),
):
    """
    Active jobs whose skills match the requested ones.
    Falls back to the logged-in user's profile skills; with no skills at all
    the list is empty. Job seekers don't see jobs they already applied to.
    """
    requested = split_skills(skills)
    if not requested and current_user:
        requested = split_skills(current_user.get("skills"))

    exclude = None
    if current_user and current_user.get("role") == ROLE_JOB_SEEKER:
        exclude = current_user["_id"]

    jobs = await job_service.list_active_by_skills(requested, exclude_applicant=exclude)
    return {"jobs": serialize_docs(jobs)}


# ===========================
# EMPLOYER ENDPOINTS
# ===========================

# ✅ 2. POST A JOB (Employer)
@router.post("/post", response_model=JobEnvelope)
async def post_job(job: JobCreate, current_user: dict = Depends(get_current_user)):
    created = await job_service.post_job(current_user, job.model_dump())
    return {"message": "Job Posted Successfully!", "job": serialize_doc(created)}


# ✅ 3. MY JOBS (Employer) - everything ever posted, expired included
@router.get("/getmyjobs", response_model=JobListResponse)
async def get_my_jobs(current_user: dict = Depends(get_current_user)):
    jobs = await job_service.list_by_owner(current_user)
    return {"jobs": serialize_docs(jobs)}


# ✅ 4. UPDATE JOB (Owner)
@router.put("/update/{job_id}", response_model=JobEnvelope)
async def update_job(job_id: str, job_update: JobUpdate, current_user: dict = Depends(get_current_user)):
    job = await job_service.update_job(job_id, current_user, job_update.model_dump(exclude_unset=True))
    return {"message": "Job Updated!", "job": serialize_doc(job)}


# ✅ 5. DELETE JOB (Owner)
@router.delete("/delete/{job_id}")
async def delete_job(job_id: str, current_user: dict = Depends(get_current_user)):
    result = await job_service.delete_job(job_id, current_user)
    return {
        "success": True,
        "message": "Job Deleted!",
        "job_id": str(result["job_id"]),
        "applications_existed": result["applications_existed"],
    }


# ✅ 6. GET SINGLE JOB (Public)
@router.get("/{job_id}", response_model=JobEnvelope)
async def get_single_job(job_id: str):
    job = await job_service.get_by_id(job_id)
    return {"job": serialize_doc(job)}
