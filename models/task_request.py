import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, Text, Index
import datetime
from database import Base


class TaskRequestStatus(enum.Enum):
    """Статусы заявок на доступ к задаче"""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskRequestDB(Base):
    __tablename__ = "task_requests"
    __table_args__ = (
        Index("ix_task_requests_task_requester_status", "task_id", "requested_by", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_code = Column(String(20), nullable=False)
    # Ссылка может повиснуть после удаления задачи
    task_id = Column(Integer, index=True, nullable=True)
    requested_by = Column(Integer, index=True, nullable=False)
    status = Column(Enum(TaskRequestStatus), default=TaskRequestStatus.PENDING, nullable=False)
    message = Column(Text, default="", nullable=False)
    responded_at = Column(DateTime, nullable=True)
    responded_by = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<TaskRequest(id={self.id}, task_code='{self.task_code}', status='{self.status}')>"
