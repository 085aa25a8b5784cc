import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum, Text
import datetime
from database import Base


class ProjectStatus(enum.Enum):
    """Статусы проектов"""
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


class ProjectDB(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    project_code = Column(String(20), unique=True, index=True, nullable=False)
    # Владелец проекта; вся авторизация по проекту и его задачам идёт от этого поля
    created_by = Column(Integer, index=True, nullable=False)
    deadline = Column(DateTime, nullable=True)
    status = Column(Enum(ProjectStatus), default=ProjectStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<Project(id={self.id}, code='{self.project_code}', created_by={self.created_by})>"
