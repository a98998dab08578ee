"""Tests for the application ledger."""

import asyncio

import pytest
from bson import ObjectId

from careerconnect.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from careerconnect.models.application import Application, ResumeRef
from careerconnect.models.user import ROLE_EMPLOYER, ROLE_JOB_SEEKER
from careerconnect.realtime import manager
from careerconnect.services import applications as application_service

from conftest import RecordingSocket

PAYLOAD = {
    "name": "Jamie Seeker",
    "email": "jamie@careerconnect.io",
    "phone": "9876543210",
    "address": "12 Park Street",
    "cover_letter": "I would love to join the team.",
}


class _FailingJobs:
    """Wraps a collection so the job side cleanup blows up."""

    def __init__(self, jobs):
        self._jobs = jobs

    async def update_one(self, *args, **kwargs):
        raise RuntimeError("jobs collection unavailable")

    def __getattr__(self, name):
        return getattr(self._jobs, name)


class _DbWithFailingJobs:
    def __init__(self, db):
        self._db = db
        self.jobs = _FailingJobs(db.jobs)

    def __getattr__(self, name):
        return getattr(self._db, name)


class TestApplicationModel:
    def test_for_job_builds_party_refs(self):
        job = {"_id": ObjectId(), "posted_by": ObjectId()}
        applicant = ObjectId()

        application = Application.for_job(
            job, str(applicant),
            name="A", email="a@careerconnect.io", phone="1", resume=ResumeRef(url="/r"),
        )

        assert application.applicant_id.user == applicant
        assert application.employer_id.user == job["posted_by"]
        assert application.to_document()["employer_id"] == {"user": job["posted_by"], "role": ROLE_EMPLOYER}


class TestSubmit:
    async def test_creates_ledger_entry_and_projection(self, db, make_job, seeker, employer):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        assert application["status"] == "submitted"
        assert application["applicant_id"] == {"user": seeker["_id"], "role": ROLE_JOB_SEEKER}
        assert application["employer_id"] == {"user": employer["_id"], "role": ROLE_EMPLOYER}
        assert application["resume"]["url"] == seeker["resume_url"]

        stored_job = await db.jobs.find_one({"_id": job["_id"]})
        assert stored_job["applicants"] == [seeker["_id"]]

    async def test_uploaded_resume_wins(self, make_job, seeker):
        job = await make_job()
        upload = ResumeRef(url="/api/v1/files/resumes/abc", original_name="fresh.pdf")
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD, upload)
        assert application["resume"] == {"url": "/api/v1/files/resumes/abc", "original_name": "fresh.pdf"}

    async def test_resume_required(self, make_job, make_user):
        job = await make_job()
        no_resume = await make_user(role=ROLE_JOB_SEEKER)
        with pytest.raises(ValidationError) as exc:
            await application_service.submit_application(no_resume, job["_id"], PAYLOAD)
        assert exc.value.message == application_service.RESUME_REQUIRED

    async def test_employer_cannot_apply(self, make_job, employer):
        job = await make_job()
        with pytest.raises(AuthorizationError):
            await application_service.submit_application(employer, job["_id"], PAYLOAD)

    async def test_missing_fields(self, make_job, seeker):
        job = await make_job()
        with pytest.raises(ValidationError) as exc:
            await application_service.submit_application(seeker, job["_id"], {**PAYLOAD, "address": "  "})
        assert exc.value.message == "Please fill all fields."

    async def test_missing_or_unknown_job(self, seeker, db):
        with pytest.raises(NotFoundError):
            await application_service.submit_application(seeker, None, PAYLOAD)
        with pytest.raises(NotFoundError):
            await application_service.submit_application(seeker, "65a000000000000000000009", PAYLOAD)

    async def test_duplicate_rejected(self, db, make_job, seeker):
        job = await make_job()
        await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        with pytest.raises(ConflictError) as exc:
            await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        assert exc.value.message == application_service.ALREADY_APPLIED
        assert await db.applications.count_documents({}) == 1

    async def test_concurrent_duplicates_leave_one(self, db, make_job, seeker):
        job = await make_job()
        results = await asyncio.gather(
            application_service.submit_application(seeker, job["_id"], PAYLOAD),
            application_service.submit_application(seeker, job["_id"], PAYLOAD),
            return_exceptions=True,
        )

        assert sum(isinstance(r, dict) for r in results) == 1
        assert all(isinstance(r, ConflictError) for r in results if not isinstance(r, dict))
        assert await db.applications.count_documents({}) == 1

    async def test_unique_index_rejects_duplicate_past_the_precheck(self, db, make_job, seeker, monkeypatch):
        job = await make_job()
        await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        async def nothing_found(*args, **kwargs):
            return None

        monkeypatch.setattr(application_service, "find_existing", nothing_found)
        with pytest.raises(ConflictError) as exc:
            await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        assert exc.value.message == application_service.ALREADY_APPLIED
        assert await db.applications.count_documents({}) == 1

    async def test_expired_job_rejected(self, make_job, seeker, expired_window):
        job = await make_job(**expired_window)
        with pytest.raises(ValidationError) as exc:
            await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        assert exc.value.message == "Job is closed. You cannot apply."

    async def test_employer_notified(self, db, make_job, seeker, employer):
        socket = RecordingSocket()
        manager.join(employer["_id"], socket)
        job = await make_job()

        await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        stored = await db.notifications.find_one({"user": employer["_id"]})
        assert stored["meta"]["type"] == "application-received"
        assert [m["data"]["meta"]["type"] for m in socket.events("notification")] == ["application-received"]


class TestListings:
    async def test_each_side_sees_its_own(self, make_job, seeker, employer, make_user):
        job = await make_job()
        await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        other_employer = await make_user(role=ROLE_EMPLOYER)

        assert len(await application_service.list_for_applicant(seeker)) == 1
        assert len(await application_service.list_for_employer(employer)) == 1
        assert await application_service.list_for_employer(other_employer) == []

    async def test_roles_enforced(self, seeker, employer, db):
        with pytest.raises(AuthorizationError):
            await application_service.list_for_employer(seeker)
        with pytest.raises(AuthorizationError):
            await application_service.list_for_applicant(employer)


class TestWithdraw:
    async def test_removes_ledger_entry_and_projection(self, db, make_job, seeker):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        result = await application_service.withdraw(application["_id"], seeker)

        assert result["cleanup"] == "ok"
        assert await db.applications.count_documents({}) == 0
        assert (await db.jobs.find_one({"_id": job["_id"]}))["applicants"] == []

    async def test_cleanup_failure_keeps_delete(self, db, make_job, seeker, monkeypatch):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        monkeypatch.setattr(application_service, "get_db", lambda: _DbWithFailingJobs(db))
        result = await application_service.withdraw(application["_id"], seeker)

        assert result["cleanup"] == "failed"
        assert await db.applications.count_documents({}) == 0
        # The projection is stale but the ledger says the seeker may apply again
        assert (await db.jobs.find_one({"_id": job["_id"]}))["applicants"] == [seeker["_id"]]
        assert await db.applications.find_one({"job": job["_id"]}) is None

    async def test_only_owner_may_withdraw(self, make_job, seeker, make_user):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        stranger = await make_user(role=ROLE_JOB_SEEKER)

        with pytest.raises(AuthorizationError):
            await application_service.withdraw(application["_id"], stranger)

    async def test_unknown_application(self, seeker, db):
        with pytest.raises(NotFoundError):
            await application_service.withdraw("65a000000000000000000009", seeker)


class TestStatus:
    async def test_employer_updates_and_applicant_notified(self, db, make_job, seeker, employer):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)

        updated = await application_service.update_status(application["_id"], employer, "shortlisted")

        assert updated["status"] == "shortlisted"
        note = await db.notifications.find_one({"user": seeker["_id"]})
        assert note["meta"] == {
            "type": "application-status",
            "application_id": str(application["_id"]),
            "status": "shortlisted",
        }

    async def test_invalid_status(self, make_job, seeker, employer):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        with pytest.raises(ValidationError):
            await application_service.update_status(application["_id"], employer, "approved")

    async def test_other_employer_rejected(self, make_job, seeker, make_user):
        job = await make_job()
        application = await application_service.submit_application(seeker, job["_id"], PAYLOAD)
        other = await make_user(role=ROLE_EMPLOYER)
        with pytest.raises(AuthorizationError):
            await application_service.update_status(application["_id"], other, "hired")
