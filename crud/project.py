from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Optional
import logging

from crud.codes import PROJECT_PREFIX, create_with_unique_code
from errors import NotFoundError
from models.project import ProjectDB
from models.task import TaskDB, TaskAssignmentDB
from permissions import Principal, can_access_project
from schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)

NOT_FOUND_OR_DENIED = "Project not found or access denied"


def get_project(db: Session, project_id: int) -> Optional[ProjectDB]:
    """Проект по ID без учёта владельца (для цепочки задача -> проект)"""
    return db.query(ProjectDB).filter(ProjectDB.id == project_id).first()


def project_code_exists(db: Session, code: str) -> bool:
    return db.query(ProjectDB.id).filter(ProjectDB.project_code == code).first() is not None


def get_projects_by_owner(db: Session, owner_id: int) -> List[ProjectDB]:
    return db.query(ProjectDB).filter(
        ProjectDB.created_by == owner_id
    ).order_by(desc(ProjectDB.created_at), desc(ProjectDB.id)).all()


def get_project_ids_by_owner(db: Session, owner_id: int) -> List[int]:
    return [row.id for row in db.query(ProjectDB.id).filter(ProjectDB.created_by == owner_id).all()]


def get_owned_project(db: Session, principal: Principal, project_id: int) -> ProjectDB:
    """Проект, принадлежащий администратору.

    Поиск сразу ограничен владельцем, поэтому чужой и несуществующий
    проект неразличимы.
    """
    project = db.query(ProjectDB).filter(
        ProjectDB.id == project_id,
        ProjectDB.created_by == principal.id
    ).first()
    if not can_access_project(principal, project):
        raise NotFoundError(NOT_FOUND_OR_DENIED)
    return project


def create_project(db: Session, principal: Principal, project: ProjectCreate) -> ProjectDB:
    """Создать проект с уникальным кодом PROJ-####"""
    db_project = create_with_unique_code(
        db,
        PROJECT_PREFIX,
        lambda code: project_code_exists(db, code),
        lambda code: ProjectDB(
            name=project.name,
            description=project.description,
            deadline=project.deadline,
            project_code=code,
            created_by=principal.id
        ),
        "project_code"
    )
    logger.info(f"Project {db_project.project_code} created by admin {principal.id}")
    return db_project


def update_project(db: Session, principal: Principal, project_id: int, project_update: ProjectUpdate) -> ProjectDB:
    db_project = get_owned_project(db, principal, project_id)

    update_data = project_update.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is not None:
            setattr(db_project, field, value)

    db.commit()
    db.refresh(db_project)
    return db_project


def delete_project(db: Session, principal: Principal, project_id: int) -> None:
    """Удалить проект вместе с его задачами"""
    db_project = get_owned_project(db, principal, project_id)

    task_ids = [row.id for row in db.query(TaskDB.id).filter(TaskDB.project_id == db_project.id).all()]
    if task_ids:
        db.query(TaskAssignmentDB).filter(TaskAssignmentDB.task_id.in_(task_ids)).delete(synchronize_session=False)
        db.query(TaskDB).filter(TaskDB.id.in_(task_ids)).delete(synchronize_session=False)

    db.delete(db_project)
    db.commit()
    logger.info(f"Project {project_id} and {len(task_ids)} tasks deleted by admin {principal.id}")
