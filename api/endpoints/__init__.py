from .v1 import (
    users_router as v1_users_router,
    projects_router as v1_projects_router,
    tasks_router as v1_tasks_router,
    chats_router as v1_chats_router,
)

__all__ = [
    "v1_users_router",
    "v1_projects_router",
    "v1_tasks_router",
    "v1_chats_router"
]
