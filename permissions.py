"""Проверка прав доступа по цепочке владения.

Проект принадлежит создавшему его администратору. Права на задачу выводятся
из проекта (администратор-владелец) либо из списка назначенных
(обычный пользователь). Заявка на доступ проверяется через задачу.
"""
import enum
import logging
from typing import Optional

from pydantic import BaseModel

from errors import ForbiddenError
from models.project import ProjectDB
from models.task import TaskDB
from models.user import UserRole

logger = logging.getLogger(__name__)


class Principal(BaseModel):
    """Аутентифицированный пользователь, выполняющий операцию"""
    id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class Capability(str, enum.Enum):
    OWNER_ADMIN = "owner-admin"
    ASSIGNED_USER = "assigned-user"
    NONE = "none"


def can_access_project(principal: Principal, project: Optional[ProjectDB]) -> bool:
    """Доступ к проекту есть только у администратора, создавшего его"""
    if project is None:
        return False
    return principal.is_admin and project.created_by == principal.id


def can_access_task(principal: Principal, task: TaskDB, project: Optional[ProjectDB]) -> Capability:
    """Определить уровень доступа к задаче.

    project должен быть проектом этой задачи; если ссылка повисла,
    передаётся None и владельца у задачи нет.
    """
    if principal.is_admin:
        if project is not None and project.id == task.project_id and can_access_project(principal, project):
            return Capability.OWNER_ADMIN
        return Capability.NONE
    if principal.id in task.assigned_to:
        return Capability.ASSIGNED_USER
    return Capability.NONE


def require_admin(principal: Principal) -> Principal:
    if not principal.is_admin:
        logger.warning(f"User {principal.id} attempted an admin-only operation")
        raise ForbiddenError("Admin access required")
    return principal


def require_task_capability(principal: Principal, task: TaskDB, project: Optional[ProjectDB],
                            owner_only: bool = False) -> Capability:
    """Проверить доступ к задаче, найденной по id или коду"""
    capability = can_access_task(principal, task, project)
    if capability == Capability.NONE:
        logger.warning(f"Access to task {task.id} denied for user {principal.id}")
        if principal.is_admin:
            raise ForbiddenError("Access denied")
        raise ForbiddenError("You are not assigned to this task")
    if owner_only and capability != Capability.OWNER_ADMIN:
        logger.warning(f"Owner-only operation on task {task.id} denied for user {principal.id}")
        raise ForbiddenError("Access denied")
    return capability
