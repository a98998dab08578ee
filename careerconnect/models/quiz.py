from typing import List
from pydantic import BaseModel
from .base import MongoBaseModel, PyObjectId

class QuizAnswer(BaseModel):
    q_id: str = ""
    answer: str = ""

class QuizResult(MongoBaseModel):
    user: PyObjectId
    answers: List[QuizAnswer] = []
    skills_selected: List[str] = []
    match_count: int = 0
    matched_job_ids: List[PyObjectId] = []
    details: dict = {}
