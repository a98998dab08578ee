from typing import Literal
from pydantic import model_validator
from .base import MongoBaseModel, PyObjectId

CONNECTION_ACTIONS = {"accept": "accepted", "decline": "declined"}


def pair_key(a, b) -> str:
    """Direction-free key for a pair of users; unique per connection."""
    return ":".join(sorted((str(a), str(b))))


class Connection(MongoBaseModel):
    requester: PyObjectId
    recipient: PyObjectId
    pair: str = ""
    status: Literal["pending", "accepted", "declined"] = "pending"

    @model_validator(mode="after")
    def _fill_pair(self):
        self.pair = pair_key(self.requester, self.recipient)
        return self
