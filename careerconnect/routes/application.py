# ========================================
# careerconnect/routes/application.py
# ========================================

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from careerconnect.models.application import ResumeRef
from careerconnect.routes.files import discard_upload, store_upload
from careerconnect.routes.user import RESUME_TYPES
from careerconnect.errors import CareerConnectError, ValidationError
from careerconnect.schemas.application import (
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationStatusUpdate,
)
from careerconnect.services import applications as application_service
from careerconnect.utils.auth import get_current_user
from careerconnect.utils.serialize import serialize_doc, serialize_docs

router = APIRouter(prefix="/api/v1/application", tags=["Applications"])

# ===========================
# JOB SEEKER ENDPOINTS
# ===========================

# ✅ 1. APPLY FOR JOB (multipart, resume optional when one is saved on the profile)
@router.post("/post", response_model=ApplicationEnvelope)
async def post_application(
    job_id: str = Form(...),
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    address: str = Form(""),
    cover_letter: str = Form(""),
    resume: Optional[UploadFile] = File(None),
    current_user: dict = Depends(get_current_user),
):
    upload = None
    if resume is not None and resume.filename:
        if resume.content_type not in RESUME_TYPES:
            raise ValidationError("Resume must be PDF or DOC/DOCX")
        url = await store_upload("resumes", resume, current_user)
        upload = ResumeRef(url=url, original_name=resume.filename)

    payload = {
        "name": name,
        "email": email,
        "phone": phone,
        "address": address,
        "cover_letter": cover_letter,
    }
    try:
        application = await application_service.submit_application(current_user, job_id, payload, upload)
    except CareerConnectError:
        # Drop the fresh upload when the submission is rejected
        if upload is not None:
            await discard_upload(upload.url)
        raise
    return {"message": "Application Submitted!", "application": serialize_doc(application)}


# ✅ 2. MY APPLICATIONS (Job Seeker)
@router.get("/jobseeker/getall", response_model=ApplicationListResponse)
async def jobseeker_get_all_applications(current_user: dict = Depends(get_current_user)):
    applications = await application_service.list_for_applicant(current_user)
    return {"applications": serialize_docs(applications)}


# ✅ 3. WITHDRAW APPLICATION (Job Seeker)
@router.delete("/delete/{application_id}")
async def jobseeker_delete_application(application_id: str, current_user: dict = Depends(get_current_user)):
    result = await application_service.withdraw(application_id, current_user)
    return {
        "success": True,
        "message": "Application Deleted!",
        "application_id": str(result["application_id"]),
        "cleanup": result["cleanup"],
    }


# ===========================
# EMPLOYER ENDPOINTS
# ===========================

# ✅ 4. APPLICATIONS TO MY JOBS (Employer)
@router.get("/employer/getall", response_model=ApplicationListResponse)
async def employer_get_all_applications(current_user: dict = Depends(get_current_user)):
    applications = await application_service.list_for_employer(current_user)
    return {"applications": serialize_docs(applications)}


# ✅ 5. UPDATE APPLICATION STATUS (Employer)
@router.put("/status/{application_id}", response_model=ApplicationEnvelope)
async def update_application_status(
    application_id: str,
    status_update: ApplicationStatusUpdate,
    current_user: dict = Depends(get_current_user),
):
    application = await application_service.update_status(application_id, current_user, status_update.status)
    return {"message": "Status updated successfully", "application": serialize_doc(application)}
