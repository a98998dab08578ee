from pydantic import BaseModel

# Input: send a chat message
class MessageCreate(BaseModel):
    content: str
