from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth import admin_only, current_user_auth
from database import get_db
from permissions import Principal
from schemas.task import TaskResponse, TaskCreate, TaskUpdate, TaskAssign
from schemas.task_request import TaskAccessRequest, TaskRequestRespond, TaskRequestResponse, TaskRequestDetail
from schemas.response import StandardResponse, AdminStats
import crud.task as task_crud
import crud.task_request as request_crud
import crud.stats as stats_crud

router = APIRouter(prefix="/v1/tasks", tags=["tasks-v1"])


@router.post("/", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
def create_task(
        task: TaskCreate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Создать задачу в своём проекте"""
    db_task = task_crud.create_task(db, principal, task)
    return StandardResponse(
        message="Task created successfully",
        data=TaskResponse.model_validate(db_task)
    )


@router.get("/all", response_model=StandardResponse)
def read_admin_tasks(db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Все задачи из проектов администратора"""
    tasks = task_crud.get_admin_tasks(db, principal)
    return StandardResponse(
        message="Tasks retrieved successfully",
        data=[TaskResponse.model_validate(t) for t in tasks]
    )


@router.get("/project/{project_id}", response_model=StandardResponse)
def read_project_tasks(project_id: int, db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Задачи проекта"""
    tasks = task_crud.get_project_tasks(db, principal, project_id)
    return StandardResponse(
        message="Tasks retrieved successfully",
        data=[TaskResponse.model_validate(t) for t in tasks]
    )


@router.get("/my-tasks", response_model=StandardResponse)
def read_my_tasks(db: Session = Depends(get_db), principal: Principal = Depends(current_user_auth)):
    """Задачи, на которые назначен текущий пользователь"""
    tasks = task_crud.get_user_tasks(db, principal.id)
    return StandardResponse(
        message="Tasks retrieved successfully",
        data=[TaskResponse.model_validate(t) for t in tasks]
    )


@router.get("/stats", response_model=StandardResponse)
def read_admin_stats(db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Статистика администратора"""
    stats = stats_crud.get_admin_stats(db, principal)
    return StandardResponse(
        message="Statistics retrieved successfully",
        data=AdminStats(**stats)
    )


@router.get("/requests", response_model=StandardResponse)
def read_task_requests(db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Заявки на доступ к задачам администратора"""
    requests = request_crud.get_admin_request_details(db, principal)
    return StandardResponse(
        message="Task requests retrieved successfully",
        data=[TaskRequestDetail(**r) for r in requests]
    )


@router.put("/requests/{request_id}", response_model=StandardResponse)
def respond_to_task_request(
        request_id: int,
        response: TaskRequestRespond,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Одобрить или отклонить заявку"""
    task_request = request_crud.respond_to_request(db, principal, request_id, response.status)
    return StandardResponse(
        message=f"Request {task_request.status.value}",
        data=TaskRequestResponse.model_validate(task_request)
    )


@router.post("/request", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
def request_task_access(
        access_request: TaskAccessRequest,
        db: Session = Depends(get_db),
        principal: Principal = Depends(current_user_auth)
):
    """Запросить доступ к задаче по коду"""
    task_request = request_crud.request_access(db, principal, access_request.task_code, access_request.message)
    return StandardResponse(
        message="Access request created successfully",
        data=TaskRequestResponse.model_validate(task_request)
    )


@router.get("/code/{code}", response_model=StandardResponse)
def read_task_by_code(code: str, db: Session = Depends(get_db), principal: Principal = Depends(current_user_auth)):
    """Получить задачу по коду"""
    db_task = task_crud.get_task_by_code_for_principal(db, principal, code)
    return StandardResponse(
        message="Task retrieved successfully",
        data=TaskResponse.model_validate(db_task)
    )


@router.get("/{task_id}", response_model=StandardResponse)
def read_task(task_id: int, db: Session = Depends(get_db), principal: Principal = Depends(current_user_auth)):
    """Получить задачу по ID"""
    db_task = task_crud.get_task_for_principal(db, principal, task_id)
    return StandardResponse(
        message="Task retrieved successfully",
        data=TaskResponse.model_validate(db_task)
    )


@router.put("/{task_id}", response_model=StandardResponse)
def update_task(
        task_id: int,
        task: TaskUpdate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(current_user_auth)
):
    """Обновить задачу"""
    db_task = task_crud.update_task(db, principal, task_id, task)
    return StandardResponse(
        message="Task updated successfully",
        data=TaskResponse.model_validate(db_task)
    )


@router.post("/{task_id}/assign", response_model=StandardResponse)
def assign_users_to_task(
        task_id: int,
        assignment: TaskAssign,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Назначить пользователей на задачу по email"""
    db_task = task_crud.assign_users_by_email(db, principal, task_id, assignment.emails)
    return StandardResponse(
        message="Users assigned to task successfully",
        data=TaskResponse.model_validate(db_task)
    )


@router.delete("/{task_id}", response_model=StandardResponse)
def delete_task(task_id: int, db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Удалить задачу"""
    task_crud.delete_task(db, principal, task_id)
    return StandardResponse(
        message="Task deleted successfully",
        data=None
    )
