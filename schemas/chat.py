from pydantic import BaseModel, field_validator, Field
from datetime import datetime

from models.chat import MessageType


class ChatCreate(BaseModel):
    task_id: int
    message: str = Field(..., min_length=1, max_length=5000)
    message_type: MessageType = MessageType.COMMENT

    @field_validator('message')
    @classmethod
    def message_not_empty(cls, v):
        if not v.strip():
            raise ValueError('Message cannot be empty')
        return v


class ChatResponse(BaseModel):
    id: int
    task_id: int
    sender_id: int
    message: str
    message_type: MessageType
    created_at: datetime

    class Config:
        from_attributes = True
