from .base import MongoBaseModel, PyObjectId

class Message(MongoBaseModel):
    sender: PyObjectId
    receiver: PyObjectId
    content: str
    read: bool = False
