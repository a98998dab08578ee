"""
Utility functions for exporting data to CSV format.
Used to produce the downloadable report of a quiz submission.
"""

import csv
import io
from pathlib import Path
from typing import Any, Dict, List

from careerconnect.config import settings
from careerconnect.utils.clock import utcnow


def quiz_report_csv(
    user: Dict[str, Any],
    answers: List[Dict[str, Any]],
    skills: List[str],
    jobs: List[Dict[str, Any]],
) -> str:
    """
    Build the quiz report.

    Args:
        user: the user document that took the quiz
        answers: deduplicated ``{"q_id", "answer"}`` pairs
        skills: the skills selected in the quiz
        jobs: jobs matched at submission time

    Returns:
        CSV string ready to be written or downloaded
    """

    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(["User Name", user.get("name", "")])
    writer.writerow(["User Email", user.get("email", "")])
    writer.writerow(["Date", utcnow().strftime("%Y-%m-%d %H:%M:%S")])
    writer.writerow([])

    writer.writerow(["Question Id", "Answer"])
    for answer in answers:
        writer.writerow([answer.get("q_id", ""), answer.get("answer", "")])
    writer.writerow([])

    writer.writerow(["Skills Selected", "; ".join(skills)])
    writer.writerow(["Matched Job Count", len(jobs)])
    writer.writerow([])

    writer.writerow(["Job ID", "Title", "Category", "Required Skills"])
    for job in jobs:
        writer.writerow([
            str(job.get("_id", "")),
            job.get("title", ""),
            job.get("category", ""),
            "|".join(job.get("skills") or []),
        ])

    csv_string = output.getvalue()
    output.close()

    return csv_string


def write_quiz_report(user_id, content: str) -> str:
    """Save a report under REPORTS_DIR and return its public URL path."""
    reports_dir = Path(settings.REPORTS_DIR)
    reports_dir.mkdir(parents=True, exist_ok=True)

    file_name = f"quiz-report-{user_id}-{utcnow().strftime('%Y%m%d%H%M%S%f')}.csv"
    (reports_dir / file_name).write_text(content, encoding="utf-8")

    return f"{settings.REPORTS_URL_PREFIX.rstrip('/')}/{file_name}"
