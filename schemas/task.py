from pydantic import BaseModel, field_validator, Field
from datetime import datetime
from typing import List, Optional

from models.task import TaskStatus, TaskPriority


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: TaskPriority = TaskPriority.MEDIUM

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class TaskCreate(TaskBase):
    project_id: int
    assign_to_emails: List[str] = Field(default_factory=list)

    @field_validator('assign_to_emails')
    @classmethod
    def normalize_emails(cls, v):
        return [email.strip().lower() for email in v if email and email.strip()]


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    github_repo_link: Optional[str] = Field(None, max_length=500)
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator('title')
    @classmethod
    def title_not_blank(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class TaskAssign(BaseModel):
    emails: List[str] = Field(..., min_length=1)

    @field_validator('emails')
    @classmethod
    def normalize_emails(cls, v):
        return [email.strip().lower() for email in v if email and email.strip()]


class TaskResponse(TaskBase):
    id: int
    project_id: int
    task_code: str
    assigned_by: int
    assigned_to: List[int] = []
    status: TaskStatus
    github_repo_link: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
