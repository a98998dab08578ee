from pydantic import BaseModel
from typing import Literal

# Input: accept/decline a request
class ConnectionRespond(BaseModel):
    action: Literal["accept", "decline"]
