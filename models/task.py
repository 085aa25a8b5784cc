import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, UniqueConstraint
from sqlalchemy.orm import relationship
import datetime
from database import Base


class TaskStatus(enum.Enum):
    """Статусы задач"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class TaskPriority(enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskDB(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), index=True, nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    task_code = Column(String(20), unique=True, index=True, nullable=False)
    assigned_by = Column(Integer, nullable=False)
    due_date = Column(DateTime, nullable=True)
    priority = Column(Enum(TaskPriority), default=TaskPriority.MEDIUM, nullable=False)
    status = Column(Enum(TaskStatus), default=TaskStatus.PENDING, nullable=False)
    github_repo_link = Column(String(500), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    assignments = relationship("TaskAssignmentDB", back_populates="task", cascade="all, delete-orphan")

    @property
    def assigned_to(self) -> list:
        return [assignment.user_id for assignment in self.assignments]

    def __repr__(self):
        return f"<Task(id={self.id}, code='{self.task_code}', status='{self.status}')>"


class TaskAssignmentDB(Base):
    __tablename__ = "task_assignments"
    __table_args__ = (UniqueConstraint("task_id", "user_id", name="uq_task_assignment"),)

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), index=True, nullable=False)
    # Без внешнего ключа: удаление пользователя не каскадируется
    user_id = Column(Integer, index=True, nullable=False)
    assigned_at = Column(DateTime, default=datetime.datetime.utcnow)

    task = relationship("TaskDB", back_populates="assignments")

    def __repr__(self):
        return f"<TaskAssignment(task_id={self.task_id}, user_id={self.user_id})>"
