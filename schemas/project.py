from pydantic import BaseModel, field_validator, Field
from datetime import datetime
from typing import List, Optional

from models.project import ProjectStatus
from schemas.task import TaskResponse


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    deadline: Optional[datetime] = None

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    deadline: Optional[datetime] = None

    @field_validator('name')
    @classmethod
    def name_not_blank(cls, v):
        if v is None:
            return v
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()


class ProjectResponse(ProjectBase):
    id: int
    project_code: str
    created_by: int
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProjectDetail(ProjectResponse):
    tasks: List[TaskResponse] = []
