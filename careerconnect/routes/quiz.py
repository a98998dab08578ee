# ========================================
# careerconnect/routes/quiz.py
# ========================================

from fastapi import APIRouter, Depends

from careerconnect.schemas.quiz import QuizSubmit
from careerconnect.services import quiz as quiz_service
from careerconnect.utils.auth import get_current_user
from careerconnect.utils.serialize import serialize_docs, serialize_value

router = APIRouter(prefix="/api/v1/quiz", tags=["Quiz"])


# ✅ 1. SUBMIT QUIZ
@router.post("")
async def take_quiz(body: QuizSubmit, current_user: dict = Depends(get_current_user)):
    result = await quiz_service.submit_quiz(current_user, body.answers, body.skillsSelected)
    return {
        "success": True,
        "message": "Quiz submitted.",
        "quiz_id": str(result["quiz_id"]),
        "matchCount": result["match_count"],
        "matchedJobIds": serialize_value(result["matched_job_ids"]),
        "jobs": serialize_docs(result["jobs"]),
        "reportUrl": result["report_url"],
    }


# ✅ 2. LATEST REPORT (recomputed against current jobs)
@router.get("/report")
async def quiz_report(current_user: dict = Depends(get_current_user)):
    report = await quiz_service.latest_report(current_user)
    if report is None:
        return {"success": True, "message": "No quiz taken yet.", "report": None, "jobs": []}

    return {
        "success": True,
        "report": {
            "quiz_id": str(report["quiz_id"]),
            "matchCount": report["match_count"],
            "skills": report["skills"],
            "matchedJobIds": serialize_value(report["matched_job_ids"]),
        },
        "jobs": serialize_docs(report["jobs"]),
    }
