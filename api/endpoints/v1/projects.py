from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from auth import admin_only
from database import get_db
from permissions import Principal
from schemas.project import ProjectCreate, ProjectUpdate, ProjectResponse, ProjectDetail
from schemas.task import TaskResponse
from schemas.response import StandardResponse
import crud.project as project_crud
import crud.task as task_crud

router = APIRouter(prefix="/v1/projects", tags=["projects-v1"])


@router.post("/", response_model=StandardResponse, status_code=status.HTTP_201_CREATED)
def create_project(
        project: ProjectCreate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Создать проект"""
    db_project = project_crud.create_project(db, principal, project)
    return StandardResponse(
        message="Project created successfully",
        data=ProjectResponse.model_validate(db_project)
    )


@router.get("/", response_model=StandardResponse)
def read_projects(db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Проекты текущего администратора"""
    projects = project_crud.get_projects_by_owner(db, principal.id)
    return StandardResponse(
        message="Projects retrieved successfully",
        data=[ProjectResponse.model_validate(p) for p in projects]
    )


@router.get("/{project_id}", response_model=StandardResponse)
def read_project(project_id: int, db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Проект вместе с задачами"""
    db_project = project_crud.get_owned_project(db, principal, project_id)
    tasks = task_crud.get_tasks_by_project_ids(db, [db_project.id])
    detail = ProjectDetail.model_validate(db_project)
    detail.tasks = [TaskResponse.model_validate(t) for t in tasks]
    return StandardResponse(
        message="Project retrieved successfully",
        data=detail
    )


@router.put("/{project_id}", response_model=StandardResponse)
def update_project(
        project_id: int,
        project: ProjectUpdate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Обновить проект"""
    db_project = project_crud.update_project(db, principal, project_id, project)
    return StandardResponse(
        message="Project updated successfully",
        data=ProjectResponse.model_validate(db_project)
    )


@router.delete("/{project_id}", response_model=StandardResponse)
def delete_project(project_id: int, db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Удалить проект и его задачи"""
    project_crud.delete_project(db, principal, project_id)
    return StandardResponse(
        message="Project and associated tasks deleted successfully",
        data=None
    )
