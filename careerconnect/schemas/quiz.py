from pydantic import BaseModel
from typing import Any

# Input: quiz submission. Both fields may arrive as lists or JSON strings.
class QuizSubmit(BaseModel):
    answers: Any = None
    skillsSelected: Any = None
