"""Shared fixtures: an in-memory Mongo, user/job factories and fake sockets."""

from datetime import timedelta
from uuid import uuid4

import pytest
from mongomock_motor import AsyncMongoMockClient

from careerconnect import database
from careerconnect.config import settings
from careerconnect.models.user import ROLE_EMPLOYER, ROLE_JOB_SEEKER, User
from careerconnect.realtime import manager
from careerconnect.services import jobs as job_service
from careerconnect.utils.auth import create_access_token
from careerconnect.utils.clock import utcnow
from careerconnect.utils.security import get_password_hash

PASSWORD = "secret-pass-123"
_PASSWORD_HASH = get_password_hash(PASSWORD)


class RecordingSocket:
    """Stands in for a WebSocket; keeps what was sent to it."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)

    def events(self, name=None):
        return [m for m in self.sent if name is None or m["event"] == name]


@pytest.fixture
async def db(monkeypatch):
    mock_db = AsyncMongoMockClient()[f"careerconnect_test_{uuid4().hex}"]
    monkeypatch.setattr(database, "db", mock_db)
    await database.ensure_indexes()
    return mock_db


@pytest.fixture(autouse=True)
def clean_rooms():
    manager.rooms.clear()
    yield
    manager.rooms.clear()


@pytest.fixture(autouse=True)
def reports_dir(tmp_path, monkeypatch):
    path = tmp_path / "reports"
    monkeypatch.setattr(settings, "REPORTS_DIR", str(path))
    return path


@pytest.fixture
def make_user(db):
    async def _make(role=ROLE_JOB_SEEKER, **overrides):
        fields = {
            "name": "Test User",
            "email": f"user-{uuid4().hex[:10]}@careerconnect.io",
            "phone": "9876543210",
            "password": _PASSWORD_HASH,
            "role": role,
        }
        fields.update(overrides)
        doc = User(**fields).to_document()
        result = await db.users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    return _make


@pytest.fixture
async def employer(make_user):
    return await make_user(role=ROLE_EMPLOYER, name="Acme Hiring")


@pytest.fixture
async def seeker(make_user):
    return await make_user(
        role=ROLE_JOB_SEEKER,
        name="Jamie Seeker",
        skills=["React", "Python"],
        resume_url="/api/v1/files/resumes/65a000000000000000000001",
        resume_original_name="cv.pdf",
    )


def job_fields(**overrides):
    fields = {
        "title": "Frontend Engineer",
        "description": "Build and maintain the customer facing web application.",
        "category": "Engineering",
        "country": "India",
        "city": "Pune",
        "location": "Baner Road",
        "fixed_salary": 90000,
        "skills": ["ReactJS", "TypeScript"],
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def make_job(db, employer):
    async def _make(owner=None, **overrides):
        return await job_service.post_job(owner or employer, job_fields(**overrides))

    return _make


@pytest.fixture
def expired_window():
    now = utcnow()
    return {"start_date": now - timedelta(days=10), "end_date": now - timedelta(days=1)}


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user['_id'])}"}

    return _headers
