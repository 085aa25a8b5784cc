from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from typing import Optional

from database import get_db
from permissions import Principal, require_admin
import crud.user as user_crud


def current_user_auth(
        x_user_id: Optional[int] = Header(None, description="ID пользователя от шлюза авторизации"),
        db: Session = Depends(get_db)
) -> Principal:
    """Текущий пользователь.

    Токены проверяет внешний шлюз и передаёт id пользователя в заголовке
    X-User-Id; роль берётся из нашей БД.
    """
    if x_user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated"
        )
    user = user_crud.get_user(db, x_user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user"
        )
    return Principal(id=user.id, role=user.role)


def admin_only(principal: Principal = Depends(current_user_auth)) -> Principal:
    return require_admin(principal)
