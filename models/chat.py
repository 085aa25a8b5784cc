import enum
from sqlalchemy import Column, Integer, DateTime, Enum, Text
import datetime
from database import Base


class MessageType(enum.Enum):
    COMMENT = "comment"
    ERROR = "error"
    UPDATE = "update"


class ChatDB(Base):
    __tablename__ = "chats"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, index=True, nullable=False)
    sender_id = Column(Integer, nullable=False)
    message = Column(Text, nullable=False)
    message_type = Column(Enum(MessageType), default=MessageType.COMMENT, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Chat(id={self.id}, task_id={self.task_id}, sender_id={self.sender_id})>"
