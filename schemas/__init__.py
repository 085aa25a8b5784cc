from .user import UserCreate, UserUpdate, UserResponse, AccessCodeUpdate
from .task import TaskCreate, TaskUpdate, TaskAssign, TaskResponse
from .project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetail
from .task_request import TaskAccessRequest, TaskRequestRespond, TaskRequestResponse, TaskRequestDetail
from .chat import ChatCreate, ChatResponse
from .response import (
    StandardResponse,
    ErrorResponse,
    PaginatedResponse,
    AdminStats,
    UserStats,
    HealthCheckResponse
)

__all__ = [
    # User schemas
    "UserCreate", "UserUpdate", "UserResponse", "AccessCodeUpdate",

    # Task schemas
    "TaskCreate", "TaskUpdate", "TaskAssign", "TaskResponse",

    # Project schemas
    "ProjectCreate", "ProjectUpdate", "ProjectResponse", "ProjectDetail",

    # Task request schemas
    "TaskAccessRequest", "TaskRequestRespond", "TaskRequestResponse", "TaskRequestDetail",

    # Chat schemas
    "ChatCreate", "ChatResponse",

    # Response schemas
    "StandardResponse",
    "ErrorResponse",
    "PaginatedResponse",
    "AdminStats",
    "UserStats",
    "HealthCheckResponse"
]
