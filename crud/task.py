from sqlalchemy.orm import Session, selectinload
from sqlalchemy import desc
from typing import List, Optional, Tuple
import datetime
import logging

from crud.codes import TASK_PREFIX, create_with_unique_code, normalize_code
from crud.project import get_owned_project, get_project, get_project_ids_by_owner
import crud.user as user_crud
from errors import NotFoundError
from models.task import TaskDB, TaskAssignmentDB, TaskStatus
from permissions import Capability, Principal, require_task_capability
from schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def get_task(db: Session, task_id: int) -> Optional[TaskDB]:
    """Получить задачу по ID вместе с назначениями"""
    return db.query(TaskDB).options(
        selectinload(TaskDB.assignments)
    ).filter(TaskDB.id == task_id).first()


def get_task_by_code(db: Session, code: str) -> Optional[TaskDB]:
    return db.query(TaskDB).options(
        selectinload(TaskDB.assignments)
    ).filter(TaskDB.task_code == normalize_code(code)).first()


def task_code_exists(db: Session, code: str) -> bool:
    return db.query(TaskDB.id).filter(TaskDB.task_code == code).first() is not None


def get_tasks_by_project_ids(db: Session, project_ids: List[int]) -> List[TaskDB]:
    if not project_ids:
        return []
    return db.query(TaskDB).options(
        selectinload(TaskDB.assignments)
    ).filter(TaskDB.project_id.in_(project_ids)).order_by(desc(TaskDB.created_at), desc(TaskDB.id)).all()


def get_tasks_by_ids(db: Session, task_ids: List[int]) -> List[TaskDB]:
    if not task_ids:
        return []
    return db.query(TaskDB).filter(TaskDB.id.in_(set(task_ids))).all()


def get_task_ids_by_project_ids(db: Session, project_ids: List[int]) -> List[int]:
    if not project_ids:
        return []
    return [row.id for row in db.query(TaskDB.id).filter(TaskDB.project_id.in_(project_ids)).all()]


def get_admin_tasks(db: Session, principal: Principal) -> List[TaskDB]:
    """Задачи из всех проектов администратора"""
    return get_tasks_by_project_ids(db, get_project_ids_by_owner(db, principal.id))


def get_project_tasks(db: Session, principal: Principal, project_id: int) -> List[TaskDB]:
    project = get_owned_project(db, principal, project_id)
    return get_tasks_by_project_ids(db, [project.id])


def get_user_tasks(db: Session, user_id: int) -> List[TaskDB]:
    """Задачи, на которые назначен пользователь"""
    return db.query(TaskDB).join(TaskDB.assignments).options(
        selectinload(TaskDB.assignments)
    ).filter(TaskAssignmentDB.user_id == user_id).order_by(desc(TaskDB.created_at), desc(TaskDB.id)).all()


def resolve_task_access(db: Session, principal: Principal, task: Optional[TaskDB],
                        owner_only: bool = False) -> Tuple[TaskDB, Capability]:
    """Задача уже найдена по id или коду; проверяем доступ отдельно"""
    if task is None:
        raise NotFoundError("Task not found")
    project = get_project(db, task.project_id)
    capability = require_task_capability(principal, task, project, owner_only=owner_only)
    return task, capability


def get_task_for_principal(db: Session, principal: Principal, task_id: int) -> TaskDB:
    task, _ = resolve_task_access(db, principal, get_task(db, task_id))
    return task


def get_task_by_code_for_principal(db: Session, principal: Principal, code: str) -> TaskDB:
    task, _ = resolve_task_access(db, principal, get_task_by_code(db, code))
    return task


def add_assignee(task: TaskDB, user_id: int) -> bool:
    """Добавить пользователя в назначенные, если его там ещё нет"""
    if user_id in task.assigned_to:
        return False
    task.assignments.append(TaskAssignmentDB(user_id=user_id))
    return True


def create_task(db: Session, principal: Principal, task: TaskCreate) -> TaskDB:
    """Создать задачу в проекте администратора"""
    project = get_owned_project(db, principal, task.project_id)
    assignees = user_crud.get_users_by_emails(db, task.assign_to_emails)

    db_task = create_with_unique_code(
        db,
        TASK_PREFIX,
        lambda code: task_code_exists(db, code),
        lambda code: TaskDB(
            project_id=project.id,
            title=task.title,
            description=task.description,
            task_code=code,
            assigned_by=principal.id,
            due_date=task.due_date,
            priority=task.priority,
            status=TaskStatus.PENDING,
            assignments=[TaskAssignmentDB(user_id=user.id) for user in assignees]
        ),
        "task_code"
    )
    if len(assignees) < len(task.assign_to_emails):
        found = {user.email for user in assignees}
        logger.warning(f"Task {db_task.task_code}: no users for emails {sorted(set(task.assign_to_emails) - found)}")
    logger.info(f"Task {db_task.task_code} created in project {project.id} by admin {principal.id}")
    return db_task


def update_task(db: Session, principal: Principal, task_id: int, task_update: TaskUpdate) -> TaskDB:
    """Обновить задачу: администратор-владелец или назначенный пользователь"""
    db_task = get_task_for_principal(db, principal, task_id)

    update_data = task_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field == 'github_repo_link' or value is not None:
            setattr(db_task, field, value)

    if db_task.status == TaskStatus.COMPLETED and db_task.completed_at is None:
        db_task.completed_at = datetime.datetime.utcnow()

    db.commit()
    db.refresh(db_task)
    return db_task


def assign_users_by_email(db: Session, principal: Principal, task_id: int, emails: List[str]) -> TaskDB:
    """Назначить пользователей по email (объединение с уже назначенными)"""
    db_task, _ = resolve_task_access(db, principal, get_task(db, task_id), owner_only=True)

    users = user_crud.get_users_by_emails(db, emails)
    if not users:
        raise NotFoundError("No users found for the given emails")

    added = [user.id for user in users if add_assignee(db_task, user.id)]
    db.commit()
    db.refresh(db_task)
    logger.info(f"Task {db_task.task_code}: assigned users {added}")
    return db_task


def delete_task(db: Session, principal: Principal, task_id: int) -> None:
    """Удалить задачу. Заявки и чат по ней остаются с повисшей ссылкой"""
    db_task, _ = resolve_task_access(db, principal, get_task(db, task_id), owner_only=True)
    db.delete(db_task)
    db.commit()
    logger.info(f"Task {task_id} deleted by admin {principal.id}")
