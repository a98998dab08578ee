# ========================================
# careerconnect/main.py
# ========================================

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from careerconnect.config import settings
from careerconnect.database import close_mongo_connection, connect_to_mongo, get_db
from careerconnect.errors import CareerConnectError
from careerconnect.services.jobs import expire_stale_jobs
from careerconnect.utils.logging import configure_logging

# ===========================
# IMPORT ALL ROUTERS
# ===========================

# Users, profiles & people
from careerconnect.routes.user import people_router
from careerconnect.routes.user import router as user_router

# Uploaded files (GridFS)
from careerconnect.routes.files import router as files_router

# Jobs & applications
from careerconnect.routes.job import router as job_router
from careerconnect.routes.application import router as application_router

# Networking
from careerconnect.routes.connection import router as connection_router
from careerconnect.routes.message import router as message_router
from careerconnect.routes.notification import router as notification_router
from careerconnect.routes.realtime import router as realtime_router

# Quiz
from careerconnect.routes.quiz import router as quiz_router

configure_logging()
logger = structlog.get_logger(__name__)


# ===========================
# DATABASE LIFECYCLE
# ===========================

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    expired = await expire_stale_jobs()
    logger.info("startup_complete", expired_jobs=expired)
    yield
    await close_mongo_connection()


# ===========================
# CREATE FASTAPI APP
# ===========================

app = FastAPI(
    title=settings.APP_NAME,
    description="Job board backend: jobs, applications, connections, chat and skills quiz",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ===========================
# CORS MIDDLEWARE
# ===========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===========================
# ERROR HANDLERS
# ===========================

@app.exception_handler(CareerConnectError)
async def careerconnect_error_handler(request: Request, exc: CareerConnectError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "kind": exc.kind, "detail": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "kind": "validation",
            "detail": f"{field}: {message}" if field else message,
        },
    )


# ===========================
# STATIC REPORTS
# ===========================
Path(settings.REPORTS_DIR).mkdir(parents=True, exist_ok=True)
app.mount(settings.REPORTS_URL_PREFIX, StaticFiles(directory=settings.REPORTS_DIR), name="reports")

# ===========================
# REGISTER ROUTERS
# ===========================

app.include_router(user_router)
app.include_router(people_router)
app.include_router(files_router)
app.include_router(job_router)
app.include_router(application_router)
app.include_router(connection_router)
app.include_router(message_router)
app.include_router(notification_router)
app.include_router(quiz_router)
app.include_router(realtime_router)


# ===========================
# ROOT ENDPOINTS
# ===========================

@app.get("/")
async def root():
    """API root endpoint with feature summary"""
    return {
        "status": "✅ CareerConnect API Running",
        "version": settings.APP_VERSION,
        "documentation": "/docs",
        "endpoints": {
            "users": ["/api/v1/user/register", "/api/v1/user/login", "/api/v1/user/me", "/api/v1/people"],
            "jobs": ["/api/v1/job/getall", "/api/v1/job/post", "/api/v1/job/getmyjobs", "/api/v1/job/{id}"],
            "applications": [
                "/api/v1/application/post",
                "/api/v1/application/jobseeker/getall",
                "/api/v1/application/employer/getall",
            ],
            "network": ["/api/v1/connections", "/api/v1/messages/{other_id}", "/api/v1/notifications", "/ws"],
            "quiz": ["/api/v1/quiz", "/api/v1/quiz/report"],
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    try:
        await get_db().command("ping")
        database = "connected"
    except Exception as e:
        logger.warning("health_ping_failed", error=str(e))
        database = "unavailable"

    return {
        "status": "healthy" if database == "connected" else "degraded",
        "database": database,
        "version": settings.APP_VERSION,
    }
