from pydantic import BaseModel
from typing import List, Optional

# Input: mark notifications read
class NotificationMarkRead(BaseModel):
    ids: Optional[List[str]] = None
    all: bool = False
