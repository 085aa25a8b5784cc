from pydantic import BaseModel, Field
from typing import Any, Optional, List, Generic, TypeVar
from datetime import datetime

T = TypeVar('T')

class StandardResponse(BaseModel):
    """Стандартный ответ для успешных операций"""
    success: bool = True
    message: str
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        from_attributes = True


class ErrorResponse(BaseModel):
    """Стандартный ответ для ошибок"""
    success: bool = False
    error: str
    details: Optional[Any] = None
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        from_attributes = True


class PaginatedResponse(BaseModel, Generic[T]):
    """Стандартный ответ для пагинированных списков"""
    success: bool = True
    message: str
    data: List[T]
    pagination: dict = Field(
        default_factory=lambda: {
            "total": 0,
            "page": 1,
            "size": 100,
            "pages": 1
        }
    )
    timestamp: datetime = Field(default_factory=datetime.now)

    class Config:
        from_attributes = True


class AdminStats(BaseModel):
    """Сводка администратора по его проектам"""
    total_projects: int = 0
    total_tasks: int = 0
    pending_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0
    pending_requests: int = 0


class UserStats(BaseModel):
    """Статистика по пользователям"""
    total_users: int = 0
    admin_count: int = 0
    user_count: int = 0
    users_with_access_code: int = 0
    users_without_access_code: int = 0


class HealthCheckResponse(BaseModel):
    """Ответ для health check эндпоинта"""
    success: bool = True
    message: str
    service: str
    database: str
    timestamp: datetime = Field(default_factory=datetime.now)
