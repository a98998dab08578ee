"""
Application ledger: one application per (job seeker, job).

The ledger is the source of truth for "has applied". ``Job.applicants`` is a
read-optimised projection of it, updated after the ledger write and
allowed to lag behind when a cleanup fails.
"""

from datetime import datetime
from typing import Any, Awaitable, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from pymongo.errors import DuplicateKeyError

from careerconnect.database import as_object_id, get_db
from careerconnect.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from careerconnect.models.application import APPLICATION_STATUSES, Application, ResumeRef
from careerconnect.models.user import ROLE_EMPLOYER, ROLE_JOB_SEEKER
from careerconnect.services import jobs as job_directory
from careerconnect.services.notifications import create_notification
from careerconnect.services.users import get_user, require_role
from careerconnect.utils.clock import utcnow

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone", "address", "cover_letter")
ALREADY_APPLIED = "You have already applied to this job."
EMPLOYER_DENIED = "Employer not allowed to access this resource."
JOB_SEEKER_DENIED = "Job Seeker not allowed to access this resource."
RESUME_REQUIRED = "Resume required. Please upload resume in Dashboard or attach it here."


async def run_compensation(name: str, action: Awaitable, **context) -> bool:
    """Attempt a follow-up write whose failure must not undo the primary one.

    The outcome is logged and returned; errors are never raised.
    """
    try:
        await action
    except Exception as e:
        logger.warning("compensation_failed", action=name, error=str(e), **context)
        return False
    logger.info("compensation_applied", action=name, **context)
    return True


async def resolve_resume(applicant: Dict[str, Any], upload: Optional[ResumeRef]) -> ResumeRef:
    """A fresh upload wins over the resume saved on the profile."""
    if upload is not None and upload.url:
        return upload

    user = await get_user(applicant["_id"])
    if user.get("resume_url"):
        return ResumeRef(url=user["resume_url"], original_name=user.get("resume_original_name"))

    raise ValidationError(RESUME_REQUIRED)


async def find_existing(applicant_id, job_id) -> Optional[Dict[str, Any]]:
    return await get_db().applications.find_one({"applicant_id.user": applicant_id, "job": job_id})


async def submit_application(
    applicant: Dict[str, Any],
    job_id,
    payload: Dict[str, Any],
    upload: Optional[ResumeRef] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    require_role(applicant, ROLE_JOB_SEEKER, EMPLOYER_DENIED)
    now = now or utcnow()

    if not job_id:
        raise NotFoundError("Job not provided!")
    job = await job_directory.find_job(job_id)

    fields = {k: str(payload.get(k) or "").strip() for k in REQUIRED_FIELDS}
    if not all(fields.values()):
        raise ValidationError("Please fill all fields.")

    resume = await resolve_resume(applicant, upload)

    # Pre-check only; the unique index below is what actually guarantees it
    if await find_existing(applicant["_id"], job["_id"]):
        raise ConflictError(ALREADY_APPLIED)

    if not job_directory.is_active(job, now):
        raise ValidationError(job_directory.JOB_CLOSED)

    try:
        application = Application.for_job(
            job, applicant["_id"], resume=resume, created_at=now, updated_at=now, **fields
        )
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"])

    doc = application.to_document()
    try:
        result = await get_db().applications.insert_one(doc)
    except DuplicateKeyError:
        logger.info("application_duplicate_rejected", job_id=str(job["_id"]), applicant=str(applicant["_id"]))
        raise ConflictError(ALREADY_APPLIED)
    doc["_id"] = result.inserted_id

    await job_directory.record_applicant(job["_id"], applicant["_id"], now)

    logger.info("application_submitted", application_id=str(doc["_id"]), job_id=str(job["_id"]))

    await create_notification(
        job["posted_by"],
        "New application",
        f"{fields['name']} applied to {job.get('title', 'your job')}",
        {"type": "application-received", "application_id": str(doc["_id"]), "job_id": str(job["_id"])},
    )
    return doc


async def list_for_employer(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    require_role(user, ROLE_EMPLOYER, JOB_SEEKER_DENIED)
    cursor = get_db().applications.find({"employer_id.user": user["_id"]}).sort([("created_at", -1), ("_id", -1)])
    return await cursor.to_list(None)


async def list_for_applicant(user: Dict[str, Any]) -> List[Dict[str, Any]]:
    require_role(user, ROLE_JOB_SEEKER, EMPLOYER_DENIED)
    cursor = get_db().applications.find({"applicant_id.user": user["_id"]}).sort([("created_at", -1), ("_id", -1)])
    return await cursor.to_list(None)


async def find_application(application_id) -> Dict[str, Any]:
    oid = as_object_id(application_id)
    application = await get_db().applications.find_one({"_id": oid}) if oid else None
    if not application:
        raise NotFoundError("Application not found!")
    return application


async def withdraw(application_id, user: Dict[str, Any]) -> Dict[str, Any]:
    """Delete the application, then try to drop the user from the job.

    The delete stands even when the job side cleanup fails; the returned
    ``cleanup`` field tells which way it went.
    """
    require_role(user, ROLE_JOB_SEEKER, EMPLOYER_DENIED)
    application = await find_application(application_id)
    if application["applicant_id"]["user"] != user["_id"]:
        raise AuthorizationError("Not authorized to withdraw this application")

    db = get_db()
    await db.applications.delete_one({"_id": application["_id"]})

    cleaned = await run_compensation(
        "remove_job_applicant",
        db.jobs.update_one({"_id": application["job"]}, {"$pull": {"applicants": user["_id"]}}),
        job_id=str(application["job"]),
        applicant=str(user["_id"]),
    )

    logger.info("application_withdrawn", application_id=str(application["_id"]))
    return {"application_id": application["_id"], "cleanup": "ok" if cleaned else "failed"}


async def update_status(application_id, user: Dict[str, Any], status: str) -> Dict[str, Any]:
    require_role(user, ROLE_EMPLOYER, JOB_SEEKER_DENIED)
    if status not in APPLICATION_STATUSES:
        raise ValidationError(f"Invalid status. Use one of: {', '.join(APPLICATION_STATUSES)}")

    application = await find_application(application_id)
    if application["employer_id"]["user"] != user["_id"]:
        raise AuthorizationError("Not authorized to update this application")

    await get_db().applications.update_one(
        {"_id": application["_id"]}, {"$set": {"status": status, "updated_at": utcnow()}}
    )
    application = await find_application(application["_id"])

    await create_notification(
        application["applicant_id"]["user"],
        "Application status updated",
        f"Your application is now {status}",
        {"type": "application-status", "application_id": str(application["_id"]), "status": status},
    )
    return application
