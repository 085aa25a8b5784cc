from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional

from auth import admin_only, current_user_auth
from database import get_db
from errors import NotFoundError
from permissions import Principal
from schemas.user import UserResponse, UserUpdate, AccessCodeUpdate
from schemas.response import StandardResponse, PaginatedResponse, UserStats
import crud.user as crud
from models.user import UserRole

router = APIRouter(prefix="/v1/users", tags=["users-v1"])


@router.get("/", response_model=PaginatedResponse[UserResponse])
def read_users(
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(100, ge=1, le=1000, description="Number of records to return"),
        role: Optional[UserRole] = Query(None, description="Filter by role"),
        search: Optional[str] = Query(None, description="Search in name and email"),
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Получить список пользователей"""
    users = crud.get_users(db, skip=skip, limit=limit, role=role, search=search)
    total = crud.get_users_count(db, role=role, search=search)

    return PaginatedResponse(
        message="Users retrieved successfully",
        data=[UserResponse.model_validate(u) for u in users],
        pagination={
            "total": total,
            "page": (skip // limit) + 1 if limit > 0 else 1,
            "size": limit,
            "pages": (total + limit - 1) // limit if limit > 0 else 1
        }
    )


@router.get("/stats", response_model=StandardResponse)
def read_user_stats(db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Статистика по пользователям"""
    return StandardResponse(
        message="User statistics retrieved successfully",
        data=UserStats(**crud.get_user_stats(db))
    )


@router.get("/access-code/{access_code}", response_model=StandardResponse)
def read_users_by_access_code(
        access_code: str,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Пользователи с указанной меткой access code"""
    users = crud.get_users_by_access_code(db, access_code)
    return StandardResponse(
        message="Users retrieved successfully",
        data=[UserResponse.model_validate(u) for u in users]
    )


@router.get("/{user_id}", response_model=StandardResponse)
def read_user(user_id: int, db: Session = Depends(get_db), principal: Principal = Depends(current_user_auth)):
    """Получить пользователя по ID"""
    db_user = crud.get_user(db, user_id=user_id)
    if db_user is None:
        raise NotFoundError("User not found")
    return StandardResponse(
        message="User retrieved successfully",
        data=UserResponse.model_validate(db_user)
    )


@router.put("/{user_id}", response_model=StandardResponse)
def update_user(
        user_id: int,
        user: UserUpdate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(current_user_auth)
):
    """Обновить данные пользователя"""
    db_user = crud.update_user(db, principal, user_id, user)
    return StandardResponse(
        message="User updated successfully",
        data=UserResponse.model_validate(db_user)
    )


@router.patch("/{user_id}/access-code", response_model=StandardResponse)
def update_access_code(
        user_id: int,
        payload: AccessCodeUpdate,
        db: Session = Depends(get_db),
        principal: Principal = Depends(admin_only)
):
    """Изменить access code пользователя"""
    db_user = crud.set_access_code(db, user_id, payload.access_code)
    return StandardResponse(
        message="Access code updated successfully",
        data=UserResponse.model_validate(db_user)
    )


@router.delete("/{user_id}", response_model=StandardResponse)
def delete_user(user_id: int, db: Session = Depends(get_db), principal: Principal = Depends(admin_only)):
    """Удалить пользователя"""
    crud.delete_user(db, user_id=user_id)
    return StandardResponse(
        message="User deleted successfully",
        data=None
    )
