import pytest
import os
import sys
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ["TESTING"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")


@pytest.fixture(scope="session")
def test_database_url():
    """URL тестовой базы данных"""
    return "sqlite:///:memory:"


@pytest.fixture
def engine(test_database_url):
    """Движок тестовой БД; своя чистая in-memory база на каждый тест"""
    engine = create_engine(
        test_database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    yield engine
    engine.dispose()


@pytest.fixture
def create_tables(engine):
    """Создание таблиц перед тестом"""
    from database import Base
    import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(engine, create_tables) -> Generator[Session, None, None]:
    """Фикстура для сессии БД"""
    session = sessionmaker(bind=engine, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db_session):
    """Фабрика пользователей"""
    from crud.user import create_user
    from schemas.user import UserCreate
    from models.user import UserRole

    def _make_user(email: str, role: UserRole = UserRole.USER, name: str = None, access_code: str = None):
        return create_user(db_session, UserCreate(
            name=name or email.split("@")[0],
            email=email,
            role=role,
            access_code=access_code
        ))

    return _make_user


@pytest.fixture
def as_principal():
    """Principal для пользователя из БД"""
    from permissions import Principal

    def _as_principal(user):
        return Principal(id=user.id, role=user.role)

    return _as_principal


@pytest.fixture
def admin(make_user):
    from models.user import UserRole
    return make_user("alice@example.com", role=UserRole.ADMIN, name="Alice")


@pytest.fixture
def other_admin(make_user):
    from models.user import UserRole
    return make_user("bob@example.com", role=UserRole.ADMIN, name="Bob")


@pytest.fixture
def member(make_user):
    return make_user("uma@example.com", name="Uma")


@pytest.fixture
def project(db_session, admin, as_principal):
    """Проект администратора admin"""
    from crud.project import create_project
    from schemas.project import ProjectCreate
    return create_project(db_session, as_principal(admin), ProjectCreate(name="Website"))


@pytest.fixture
def task(db_session, admin, project, as_principal):
    """Задача в проекте project"""
    from crud.task import create_task
    from schemas.task import TaskCreate
    return create_task(db_session, as_principal(admin), TaskCreate(project_id=project.id, title="Build homepage"))


@pytest.fixture
def client(db_session):
    """HTTP клиент с подменой зависимости get_db"""
    from fastapi.testclient import TestClient
    from database import get_db
    from main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data():
    """Тестовые данные пользователя"""
    return {
        "name": "Test User",
        "email": "testuser@example.com",
        "role": "user"
    }
