from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from models.task_request import TaskRequestStatus


class TaskAccessRequest(BaseModel):
    task_code: str = Field(..., min_length=1, max_length=20)
    message: Optional[str] = Field("", max_length=1000)


class TaskRequestRespond(BaseModel):
    # Проверяется в crud, чтобы неверное значение давало 400, а не 422
    status: str


class TaskRequestResponse(BaseModel):
    id: int
    task_code: str
    task_id: Optional[int] = None
    requested_by: int
    status: TaskRequestStatus
    message: str = ""
    responded_at: Optional[datetime] = None
    responded_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskRequestDetail(TaskRequestResponse):
    """Заявка для списка администратора"""
    task_title: Optional[str] = None
    requester_name: Optional[str] = None
    requester_email: Optional[str] = None
    requester_access_code: Optional[str] = None
