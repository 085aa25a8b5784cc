from sqlalchemy.orm import Session
from sqlalchemy import or_, func
from typing import List, Optional
import logging

from errors import ConflictError, ForbiddenError, NotFoundError
from models.user import UserDB, UserRole
from permissions import Principal
from schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.email == email.strip().lower()).first()


def get_users_by_emails(db: Session, emails: List[str]) -> List[UserDB]:
    if not emails:
        return []
    normalized = {email.strip().lower() for email in emails}
    return db.query(UserDB).filter(UserDB.email.in_(normalized)).all()


def get_users_by_ids(db: Session, user_ids: List[int]) -> List[UserDB]:
    if not user_ids:
        return []
    return db.query(UserDB).filter(UserDB.id.in_(set(user_ids))).all()


def get_users_by_access_code(db: Session, access_code: str) -> List[UserDB]:
    return db.query(UserDB).filter(UserDB.access_code == access_code).order_by(UserDB.name).all()


def get_users(db: Session, skip: int = 0, limit: int = 100, role: Optional[UserRole] = None,
              search: Optional[str] = None) -> List[UserDB]:
    query = db.query(UserDB)

    if role:
        query = query.filter(UserDB.role == role)

    if search:
        search_filter = f"%{search}%"
        query = query.filter(or_(UserDB.name.ilike(search_filter), UserDB.email.ilike(search_filter)))

    return query.order_by(UserDB.email).offset(skip).limit(limit).all()


def get_users_count(db: Session, role: Optional[UserRole] = None, search: Optional[str] = None) -> int:
    query = db.query(UserDB)

    if role:
        query = query.filter(UserDB.role == role)

    if search:
        search_filter = f"%{search}%"
        query = query.filter(or_(UserDB.name.ilike(search_filter), UserDB.email.ilike(search_filter)))

    return query.count()


def create_user(db: Session, user: UserCreate) -> UserDB:
    if get_user_by_email(db, user.email):
        raise ConflictError("Email already registered")

    db_user = UserDB(
        id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        access_code=user.access_code,
        password_hash=user.password_hash
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user(db: Session, principal: Principal, user_id: int, user_update: UserUpdate) -> UserDB:
    """Обновить профиль: сам пользователь или администратор"""
    db_user = get_user(db, user_id)
    if not db_user:
        raise NotFoundError("User not found")

    if principal.id != user_id and not principal.is_admin:
        raise ForbiddenError("Not authorized to update this user")

    update_data = user_update.model_dump(exclude_unset=True)

    if 'email' in update_data and update_data['email'] and update_data['email'] != db_user.email:
        if get_user_by_email(db, update_data['email']):
            raise ConflictError("Email already registered")

    for field, value in update_data.items():
        # access_code можно очистить явным null
        if value is not None or field == 'access_code':
            setattr(db_user, field, value)

    db.commit()
    db.refresh(db_user)
    return db_user


def set_access_code(db: Session, user_id: int, access_code: Optional[str]) -> UserDB:
    db_user = get_user(db, user_id)
    if not db_user:
        raise NotFoundError("User not found")

    db_user.access_code = access_code
    db.commit()
    db.refresh(db_user)
    return db_user


def delete_user(db: Session, user_id: int) -> None:
    """Удалить пользователя. Ссылки из проектов, задач и заявок остаются как есть"""
    db_user = get_user(db, user_id)
    if not db_user:
        raise NotFoundError("User not found")

    db.delete(db_user)
    db.commit()
    logger.info(f"User {user_id} deleted")


def get_user_stats(db: Session) -> dict:
    total = db.query(func.count(UserDB.id)).scalar()
    admins = db.query(func.count(UserDB.id)).filter(UserDB.role == UserRole.ADMIN).scalar()
    with_code = db.query(func.count(UserDB.id)).filter(
        UserDB.access_code.isnot(None),
        UserDB.access_code != ""
    ).scalar()

    return {
        'total_users': total,
        'admin_count': admins,
        'user_count': total - admins,
        'users_with_access_code': with_code,
        'users_without_access_code': total - with_code
    }
