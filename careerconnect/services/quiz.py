"""
Skills quiz: normalize whatever the client sent, keep an audit record,
match the selected skills against active jobs and make them the user's
profile skills.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from careerconnect.database import get_db
from careerconnect.models.quiz import QuizAnswer, QuizResult
from careerconnect.services import jobs as job_directory
from careerconnect.services.matching import split_skills
from careerconnect.utils.clock import utcnow
from careerconnect.utils.export import quiz_report_csv, write_quiz_report

logger = structlog.get_logger(__name__)


def _answer_from(item: Any) -> Optional[Dict[str, str]]:
    if item is None:
        return None

    if isinstance(item, dict):
        q_id = item.get("q_id", item.get("qId")) or ""
        return {"q_id": str(q_id).strip(), "answer": str(item.get("answer") or "").strip()}

    if isinstance(item, str):
        try:
            parsed = json.loads(item)
        except ValueError:
            return {"q_id": "", "answer": item.strip()}
        if isinstance(parsed, dict):
            return _answer_from(parsed)
        return {"q_id": "", "answer": item.strip()}

    return {"q_id": "", "answer": str(item).strip()}


def normalize_answers(raw: Any) -> List[Dict[str, str]]:
    """Coerce an answers payload into ``[{"q_id", "answer"}]``.

    Accepts a list of dicts, a list of JSON strings or plain strings, a JSON
    array string (single quoted JSON tolerated), or one bare answer string.
    """
    if not raw:
        return []

    if isinstance(raw, (list, tuple)):
        return [a for a in (_answer_from(item) for item in raw) if a is not None]

    if isinstance(raw, str):
        for candidate in (raw, raw.replace("'", '"')):
            try:
                parsed = json.loads(candidate)
            except ValueError:
                continue
            if isinstance(parsed, (list, dict)):
                return normalize_answers(parsed if isinstance(parsed, list) else [parsed])
            break
        return [{"q_id": "", "answer": raw.strip()}]

    if isinstance(raw, dict):
        return normalize_answers([raw])

    return []


def dedupe_answers(answers: List[Dict[str, str]]) -> List[Dict[str, str]]:
    """First answer per question wins; id-less answers dedupe on their text."""
    seen = set()
    result = []
    for item in answers:
        q_id = item.get("q_id") or ""
        key = q_id if q_id else f"__ans__:{item.get('answer', '')}"
        if key in seen:
            continue
        seen.add(key)
        result.append({"q_id": q_id, "answer": item.get("answer", "")})
    return result


async def submit_quiz(
    user: Dict[str, Any],
    raw_answers: Any,
    raw_skills: Any,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    db = get_db()
    now = now or utcnow()

    answers = dedupe_answers(normalize_answers(raw_answers))
    skills = split_skills(raw_skills)

    result = QuizResult(
        user=user["_id"],
        answers=[QuizAnswer(**a) for a in answers],
        skills_selected=skills,
        created_at=now,
        updated_at=now,
    )
    doc = result.to_document()
    inserted = await db.quiz_results.insert_one(doc)
    quiz_id = inserted.inserted_id

    jobs = await job_directory.list_active_by_skills(skills, now=now)
    matched_ids = [job["_id"] for job in jobs]

    await db.quiz_results.update_one(
        {"_id": quiz_id},
        {"$set": {
            "match_count": len(jobs),
            "matched_job_ids": matched_ids,
            "details": {"matched_at": now.isoformat()},
            "updated_at": now,
        }},
    )

    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {
            "quiz_completed": True,
            "skills": skills,
            "quiz_answers": answers,
            "quiz_summary": {
                "match_count": len(jobs),
                "matched_job_ids": matched_ids,
                "skills_selected": skills,
            },
            "updated_at": now,
        }},
    )

    report_url = write_quiz_report(user["_id"], quiz_report_csv(user, answers, skills, jobs))

    logger.info("quiz_submitted", user_id=str(user["_id"]), skills=skills, match_count=len(jobs))
    return {
        "quiz_id": quiz_id,
        "match_count": len(jobs),
        "matched_job_ids": matched_ids,
        "jobs": jobs,
        "report_url": report_url,
    }


async def latest_report(user: Dict[str, Any], now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Re-run matching for the latest quiz; None if the user never took one."""
    latest = await get_db().quiz_results.find(
        {"user": user["_id"]}
    ).sort([("created_at", -1), ("_id", -1)]).limit(1).to_list(1)
    if not latest:
        return None

    skills = latest[0].get("skills_selected") or []
    jobs = await job_directory.list_active_by_skills(skills, now=now)
    return {
        "quiz_id": latest[0]["_id"],
        "skills": skills,
        "match_count": len(jobs),
        "matched_job_ids": [job["_id"] for job in jobs],
        "jobs": jobs,
    }
