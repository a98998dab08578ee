"""
Job directory: posting, skill-matched listing, ownership-gated edits and
the applicant projection kept on each job.

A job is active while ``expired`` is false and now lies within
``[start_date, end_date]``. Reads report the derived expiry without
writing it; ``expire_stale_jobs`` is the only place that latches it.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from careerconnect.config import settings
from careerconnect.database import as_object_id, get_db
from careerconnect.errors import AuthorizationError, NotFoundError, ValidationError
from careerconnect.models.job import Job
from careerconnect.models.user import ROLE_EMPLOYER
from careerconnect.services.matching import filter_matching, split_skills
from careerconnect.services.users import require_role
from careerconnect.utils.clock import to_naive_utc, utcnow

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("title", "description", "category", "country", "city", "location")
EDITABLE_FIELDS = REQUIRED_FIELDS + (
    "fixed_salary", "salary_from", "salary_to", "skills",
    "start_date", "end_date", "vacancies", "employment_type", "location_type",
)
JOB_SEEKER_DENIED = "Job Seeker not allowed to access this resource."
JOB_CLOSED = "Job is closed. You cannot apply."


# ===========================
# PURE HELPERS
# ===========================

def effective_expired(job: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    end_date = job.get("end_date")
    return bool(job.get("expired")) or (end_date is not None and end_date < now)


def is_active(job: Dict[str, Any], now: Optional[datetime] = None) -> bool:
    now = now or utcnow()
    start_date = job.get("start_date")
    if effective_expired(job, now):
        return False
    return start_date is None or start_date <= now


def with_derived_expiry(job: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    job["expired"] = effective_expired(job, now)
    return job


def _is_set(value) -> bool:
    return value is not None and value != ""


def validate_salary(fields: Dict[str, Any]) -> None:
    fixed = fields.get("fixed_salary")
    low, high = fields.get("salary_from"), fields.get("salary_to")

    has_fixed = _is_set(fixed)
    has_any_range = _is_set(low) or _is_set(high)
    has_full_range = _is_set(low) and _is_set(high)

    if has_fixed and has_any_range:
        raise ValidationError("Cannot Enter Fixed and Ranged Salary together.")
    if not has_fixed and not has_full_range:
        raise ValidationError("Please either provide fixed salary or ranged salary.")
    if has_full_range and float(low) > float(high):
        raise ValidationError("Salary From cannot be greater than Salary To.")


def validate_job_fields(fields: Dict[str, Any]) -> None:
    """Field level checks shared by post and update."""
    if any(not str(fields.get(k) or "").strip() for k in REQUIRED_FIELDS):
        raise ValidationError("Please provide full job details.")

    title = str(fields["title"]).strip()
    if not 3 <= len(title) <= 200:
        raise ValidationError("Title must contain between 3 and 200 Characters!")

    description = str(fields["description"]).strip()
    if not 30 <= len(description) <= 5000:
        raise ValidationError("Description must contain between 30 and 5000 Characters!")

    validate_salary(fields)

    if not fields.get("skills"):
        raise ValidationError("Please provide at least one skill for this job.")

    if fields["end_date"] <= fields["start_date"]:
        raise ValidationError("End date must be after the start date.")


def _window(fields: Dict[str, Any], now: datetime) -> None:
    start_date = to_naive_utc(fields.get("start_date")) or now
    end_date = to_naive_utc(fields.get("end_date"))
    if end_date is None:
        end_date = start_date + timedelta(days=settings.JOB_DEFAULT_DURATION_DAYS)
    fields["start_date"] = start_date
    fields["end_date"] = end_date


# ===========================
# OPERATIONS
# ===========================

async def post_job(owner: Dict[str, Any], fields: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    require_role(owner, ROLE_EMPLOYER, JOB_SEEKER_DENIED)
    now = now or utcnow()

    data = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS and v is not None}
    data["skills"] = split_skills(data.get("skills"))
    _window(data, now)
    validate_job_fields(data)

    for key in ("fixed_salary", "salary_from", "salary_to"):
        if not _is_set(data.get(key)):
            data[key] = None

    try:
        job = Job(posted_by=owner["_id"], job_posted_on=now, created_at=now, updated_at=now, **data)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]["msg"])

    doc = job.to_document()
    result = await get_db().jobs.insert_one(doc)
    doc["_id"] = result.inserted_id

    logger.info("job_posted", job_id=str(doc["_id"]), owner=str(owner["_id"]), skills=doc["skills"])
    return doc


async def applied_job_ids(user_id) -> set:
    """Ids of the jobs ``user_id`` holds an application for."""
    cursor = get_db().applications.find({"applicant_id.user": user_id}, {"job": 1})
    return {str(a["job"]) for a in await cursor.to_list(None)}


async def list_active_by_skills(
    requested: Iterable[str],
    exclude_applicant=None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Active jobs matching ``requested``; empty request, empty result."""
    requested = list(requested or [])
    if not requested:
        logger.info("job_listing_without_skills")
        return []

    now = now or utcnow()
    query = {
        "expired": False,
        "start_date": {"$lte": now},
        "end_date": {"$gte": now},
    }
    candidates = await get_db().jobs.find(query).sort("created_at", -1).to_list(None)
    matched = filter_matching(requested, candidates)

    if exclude_applicant is not None:
        applied = await applied_job_ids(exclude_applicant)
        matched = [
            job for job in matched
            if str(job["_id"]) not in applied
            and exclude_applicant not in (job.get("applicants") or [])
        ]

    logger.info("job_listing", requested=requested, candidates=len(candidates), matched=len(matched))
    return matched


async def list_by_owner(owner: Dict[str, Any], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    require_role(owner, ROLE_EMPLOYER, JOB_SEEKER_DENIED)
    jobs = await get_db().jobs.find({"posted_by": owner["_id"]}).sort("created_at", -1).to_list(None)
    return [with_derived_expiry(job, now) for job in jobs]


async def find_job(job_id) -> Dict[str, Any]:
    oid = as_object_id(job_id)
    job = await get_db().jobs.find_one({"_id": oid}) if oid else None
    if not job:
        raise NotFoundError("Job not found.")
    return job


async def get_by_id(job_id, now: Optional[datetime] = None) -> Dict[str, Any]:
    return with_derived_expiry(await find_job(job_id), now)


async def expire_stale_jobs(now: Optional[datetime] = None) -> int:
    """Latch ``expired`` on every job whose end date has passed."""
    now = now or utcnow()
    result = await get_db().jobs.update_many(
        {"expired": False, "end_date": {"$lt": now}},
        {"$set": {"expired": True, "updated_at": now}},
    )
    if result.modified_count:
        logger.info("jobs_expired", count=result.modified_count)
    return result.modified_count


async def _owned_job(job_id, user: Dict[str, Any], action: str) -> Dict[str, Any]:
    require_role(user, ROLE_EMPLOYER, JOB_SEEKER_DENIED)
    job = await find_job(job_id)
    if job["posted_by"] != user["_id"]:
        raise AuthorizationError(f"You can only {action} your own job postings")
    return job


async def update_job(job_id, user: Dict[str, Any], patch: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    job = await _owned_job(job_id, user, "edit")
    now = now or utcnow()

    changes = {k: v for k, v in patch.items() if k in EDITABLE_FIELDS}
    if not changes:
        raise ValidationError("No fields to update")

    if "skills" in changes:
        changes["skills"] = split_skills(changes["skills"])
    for key in ("start_date", "end_date"):
        if key in changes:
            changes[key] = to_naive_utc(changes[key])

    # Switching salary mode clears the other mode
    if _is_set(changes.get("fixed_salary")):
        changes.setdefault("salary_from", None)
        changes.setdefault("salary_to", None)
    elif _is_set(changes.get("salary_from")) or _is_set(changes.get("salary_to")):
        changes.setdefault("fixed_salary", None)

    merged = {**job, **changes}
    if merged.get("start_date") is None or merged.get("end_date") is None:
        raise ValidationError("Job start and end dates are required.")
    validate_job_fields(merged)

    changes["updated_at"] = now
    await get_db().jobs.update_one({"_id": job["_id"]}, {"$set": changes})

    logger.info("job_updated", job_id=str(job["_id"]), fields=sorted(changes))
    return with_derived_expiry(await find_job(job["_id"]), now)


async def delete_job(job_id, user: Dict[str, Any]) -> Dict[str, Any]:
    """Remove a posting. Its applications stay and keep their own copies."""
    job = await _owned_job(job_id, user, "delete")
    await get_db().jobs.delete_one({"_id": job["_id"]})

    remaining = await get_db().applications.count_documents({"job": job["_id"]})
    logger.info("job_deleted", job_id=str(job["_id"]), applications_left=remaining)
    return {"job_id": job["_id"], "applications_existed": remaining}


async def record_applicant(job_id, user_id, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Add ``user_id`` to the job's applicants; repeat calls are no-ops."""
    job = await find_job(job_id)
    if not is_active(job, now):
        raise ValidationError(JOB_CLOSED)

    await get_db().jobs.update_one({"_id": job["_id"]}, {"$addToSet": {"applicants": user_id}})
    return await find_job(job["_id"])
