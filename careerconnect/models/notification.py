from .base import MongoBaseModel, PyObjectId

class Notification(MongoBaseModel):
    user: PyObjectId
    title: str
    body: str = ""
    meta: dict = {}
    read: bool = False
