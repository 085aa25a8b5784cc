from sqlalchemy.orm import Session
from sqlalchemy import func

from crud.project import get_project_ids_by_owner
from crud.task import get_task_ids_by_project_ids
from models.task import TaskDB, TaskStatus
from models.task_request import TaskRequestDB, TaskRequestStatus
from permissions import Principal


def get_admin_stats(db: Session, principal: Principal) -> dict:
    """Счётчики по проектам администратора, считаются при каждом вызове"""
    project_ids = get_project_ids_by_owner(db, principal.id)
    task_ids = get_task_ids_by_project_ids(db, project_ids)

    result = {
        'total_projects': len(project_ids),
        'total_tasks': len(task_ids),
        'pending_tasks': 0,
        'in_progress_tasks': 0,
        'completed_tasks': 0,
        'pending_requests': 0
    }
    if not task_ids:
        return result

    by_status = db.query(TaskDB.status, func.count(TaskDB.id)).filter(
        TaskDB.id.in_(task_ids)
    ).group_by(TaskDB.status).all()
    for status, count in by_status:
        result[f"{status.value.replace('-', '_')}_tasks"] = count

    result['pending_requests'] = db.query(func.count(TaskRequestDB.id)).filter(
        TaskRequestDB.task_id.in_(task_ids),
        TaskRequestDB.status == TaskRequestStatus.PENDING
    ).scalar()

    return result
