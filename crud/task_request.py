"""Заявки на доступ к задаче по коду.

pending -> approved и pending -> rejected, обе финальные. При одобрении
заявитель добавляется в назначенные задачи в той же транзакции, что и смена
статуса заявки.
"""
from sqlalchemy.orm import Session
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import datetime
import logging

from crud.project import get_project, get_project_ids_by_owner
from crud.task import add_assignee, get_task, get_task_by_code, get_task_ids_by_project_ids, get_tasks_by_ids
from crud.user import get_users_by_ids
from errors import ConflictError, ForbiddenError, NotFoundError, PartialFailureError, ValidationError
from models.task import TaskDB
from models.task_request import TaskRequestDB, TaskRequestStatus
from models.user import UserDB
from permissions import Capability, Principal, can_access_task

logger = logging.getLogger(__name__)

DECISIONS = (TaskRequestStatus.APPROVED, TaskRequestStatus.REJECTED)


def get_task_request(db: Session, request_id: int) -> Optional[TaskRequestDB]:
    return db.query(TaskRequestDB).filter(TaskRequestDB.id == request_id).first()


def get_pending_request(db: Session, task_id: int, user_id: int) -> Optional[TaskRequestDB]:
    return db.query(TaskRequestDB).filter(
        TaskRequestDB.task_id == task_id,
        TaskRequestDB.requested_by == user_id,
        TaskRequestDB.status == TaskRequestStatus.PENDING
    ).first()


def get_requests_by_task_ids(db: Session, task_ids: List[int]) -> List[TaskRequestDB]:
    if not task_ids:
        return []
    return db.query(TaskRequestDB).filter(
        TaskRequestDB.task_id.in_(task_ids)
    ).order_by(desc(TaskRequestDB.created_at), desc(TaskRequestDB.id)).all()


def request_access(db: Session, principal: Principal, task_code: str, message: Optional[str] = None) -> TaskRequestDB:
    """Создать заявку на доступ к задаче по её коду"""
    if not task_code or not task_code.strip():
        raise ValidationError("Task code is required")

    task = get_task_by_code(db, task_code)
    if task is None:
        raise NotFoundError("Task not found with this code")

    if principal.id in task.assigned_to:
        raise ConflictError("You are already assigned to this task")

    if get_pending_request(db, task.id, principal.id):
        raise ConflictError("You already have a pending request for this task")

    task_request = TaskRequestDB(
        task_code=task.task_code,
        task_id=task.id,
        requested_by=principal.id,
        status=TaskRequestStatus.PENDING,
        message=message or ""
    )
    db.add(task_request)
    db.commit()
    db.refresh(task_request)
    logger.info(f"User {principal.id} requested access to {task.task_code} (request {task_request.id})")
    return task_request


def respond_to_request(db: Session, principal: Principal, request_id: int, decision: str) -> TaskRequestDB:
    """Одобрить или отклонить заявку.

    Статус меняется условным UPDATE по status = pending, поэтому второй
    ответ на ту же заявку (в том числе параллельный) получает Conflict.
    Если коммит не прошёл, откатываются обе записи и заявка остаётся
    pending: повтор безопасен, а добавление в назначенные идемпотентно.
    """
    try:
        new_status = TaskRequestStatus(decision)
    except ValueError:
        raise ValidationError("Status must be approved or rejected")
    if new_status not in DECISIONS:
        raise ValidationError("Status must be approved or rejected")

    task_request = get_task_request(db, request_id)
    if task_request is None:
        raise NotFoundError("Request not found")

    if task_request.status != TaskRequestStatus.PENDING:
        raise ConflictError("This request has already been processed")

    if task_request.task_id is None:
        raise NotFoundError("Associated task not found")

    task = get_task(db, task_request.task_id)
    if task is None:
        logger.warning(f"Request {request_id} points to missing task {task_request.task_id}")
        raise NotFoundError("Task not found")

    project = get_project(db, task.project_id)
    if project is None:
        logger.warning(f"Task {task.id} points to missing project {task.project_id}")
        raise NotFoundError("Project not found")

    if can_access_task(principal, task, project) != Capability.OWNER_ADMIN:
        logger.warning(f"Admin {principal.id} tried to respond to request {request_id} for project {project.id}")
        raise ForbiddenError("Access denied. You do not own this project.")

    requester_id = task_request.requested_by
    updated = db.query(TaskRequestDB).filter(
        TaskRequestDB.id == request_id,
        TaskRequestDB.status == TaskRequestStatus.PENDING
    ).update({
        TaskRequestDB.status: new_status,
        TaskRequestDB.responded_at: datetime.datetime.utcnow(),
        TaskRequestDB.responded_by: principal.id,
        TaskRequestDB.updated_at: datetime.datetime.utcnow()
    }, synchronize_session=False)
    if updated != 1:
        db.rollback()
        raise ConflictError("This request has already been processed")

    if new_status == TaskRequestStatus.APPROVED:
        add_assignee(task, requester_id)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist response to request {request_id}: {e}")
        raise PartialFailureError(
            "Failed to save the response; the request is still pending and can be retried",
            details={"request_id": request_id}
        ) from e

    db.refresh(task_request)
    logger.info(f"Request {request_id} {new_status.value} by admin {principal.id}")
    return task_request


def get_admin_requests(db: Session, principal: Principal) -> List[TaskRequestDB]:
    """Заявки к задачам из проектов администратора.

    Владение на два шага выше заявки: проекты -> задачи -> заявки.
    """
    project_ids = get_project_ids_by_owner(db, principal.id)
    task_ids = get_task_ids_by_project_ids(db, project_ids)
    return get_requests_by_task_ids(db, task_ids)


def request_to_dict(task_request: TaskRequestDB, requester: Optional[UserDB], task: Optional[TaskDB]) -> dict:
    """Заявка вместе с данными заявителя и задачи; повисшие ссылки дают None"""
    return {
        "id": task_request.id,
        "task_code": task_request.task_code,
        "task_id": task_request.task_id,
        "task_title": task.title if task else None,
        "requested_by": task_request.requested_by,
        "requester_name": requester.name if requester else None,
        "requester_email": requester.email if requester else None,
        "requester_access_code": requester.access_code if requester else None,
        "status": task_request.status,
        "message": task_request.message,
        "responded_at": task_request.responded_at,
        "responded_by": task_request.responded_by,
        "created_at": task_request.created_at,
        "updated_at": task_request.updated_at
    }


def get_admin_request_details(db: Session, principal: Principal) -> List[dict]:
    """Заявки администратора с заявителями и задачами, загруженными пачкой"""
    requests = get_admin_requests(db, principal)
    users = {user.id: user for user in get_users_by_ids(db, [r.requested_by for r in requests])}
    tasks = {task.id: task for task in get_tasks_by_ids(db, [r.task_id for r in requests if r.task_id is not None])}
    return [request_to_dict(r, users.get(r.requested_by), tasks.get(r.task_id)) for r in requests]
