from .user import UserDB, UserRole
from .project import ProjectDB, ProjectStatus
from .task import TaskDB, TaskAssignmentDB, TaskStatus, TaskPriority
from .task_request import TaskRequestDB, TaskRequestStatus
from .chat import ChatDB, MessageType

__all__ = [
    "UserDB", "UserRole",
    "ProjectDB", "ProjectStatus",
    "TaskDB", "TaskAssignmentDB", "TaskStatus", "TaskPriority",
    "TaskRequestDB", "TaskRequestStatus",
    "ChatDB", "MessageType",
]
