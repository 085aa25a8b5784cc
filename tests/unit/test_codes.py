import re

import pytest
from sqlalchemy.orm import Session

import crud.codes as codes
from crud.codes import generate_code, normalize_code


class TestGenerateCode:
    """Генерация кодов PROJ-#### / TASK-####"""

    def test_format_and_single_check_when_free(self):
        calls = []

        def exists(code):
            calls.append(code)
            return False

        code = generate_code("PROJ", exists)
        assert re.fullmatch(r"PROJ-\d{4}", code)
        assert 1000 <= int(code.split("-")[1]) <= 9999
        assert calls == [code]

    def test_retries_until_free(self, monkeypatch):
        suffixes = iter([1111, 2222, 3333])
        monkeypatch.setattr(codes.random, "randint", lambda a, b: next(suffixes))
        taken = {"TASK-1111", "TASK-2222"}

        assert generate_code("TASK", lambda code: code in taken) == "TASK-3333"

    def test_never_more_than_ten_checks_then_fallback(self, monkeypatch):
        """После 10 коллизий берётся код из времени без дополнительной проверки"""
        monkeypatch.setattr(codes.time, "time", lambda: 1700000123.456789)
        calls = []

        def always_taken(code):
            calls.append(code)
            return True

        code = generate_code("PROJ", always_taken)
        assert len(calls) == 10
        assert code == "PROJ-123456"

    def test_custom_attempt_bound(self):
        calls = []
        generate_code("TASK", lambda code: calls.append(code) or True, max_attempts=3)
        assert len(calls) == 3

    @pytest.mark.parametrize("raw, expected", [
        ("task-1234", "TASK-1234"),
        ("  Task-1234  ", "TASK-1234"),
        ("PROJ-0001", "PROJ-0001"),
    ])
    def test_normalize_code(self, raw, expected):
        assert normalize_code(raw) == expected


class TestCodesAreUnique:
    """Коды уникальны на уровне БД и при создании"""

    def test_many_projects_get_distinct_codes(self, db_session: Session, admin, as_principal):
        from crud.project import create_project
        from schemas.project import ProjectCreate

        projects = [create_project(db_session, as_principal(admin), ProjectCreate(name=f"P{i}")) for i in range(25)]
        project_codes = [p.project_code for p in projects]
        assert len(set(project_codes)) == len(project_codes)
        assert all(c.startswith("PROJ-") for c in project_codes)

    def test_generator_skips_existing_task_code(self, db_session: Session, admin, project, task, as_principal,
                                                monkeypatch):
        """Занятый код из БД не выдаётся повторно"""
        from crud.task import create_task
        from schemas.task import TaskCreate

        taken = int(task.task_code.split("-")[1])
        suffixes = iter([taken, 9999 if taken != 9999 else 1000])
        monkeypatch.setattr(codes.random, "randint", lambda a, b: next(suffixes))

        second = create_task(db_session, as_principal(admin), TaskCreate(project_id=project.id, title="Second"))
        assert second.task_code != task.task_code

    def test_insert_conflict_is_retried(self, db_session: Session, admin, project, task, as_principal, monkeypatch):
        """Нарушение уникальности при вставке ведёт к новой попытке с другим кодом"""
        from crud.task import create_task
        from schemas.task import TaskCreate

        taken = int(task.task_code.split("-")[1])
        free = 9999 if taken != 9999 else 1000
        # Проверка существования "не видит" занятый код, как при гонке двух вставок
        monkeypatch.setattr("crud.task.task_code_exists", lambda db, code: False)
        suffixes = iter([taken, free])
        monkeypatch.setattr(codes.random, "randint", lambda a, b: next(suffixes))

        second = create_task(db_session, as_principal(admin), TaskCreate(project_id=project.id, title="Racing"))
        assert second.task_code == f"TASK-{free}"

    def test_insert_conflicts_exhausted(self, db_session: Session, admin, project, task, as_principal, monkeypatch):
        from crud.task import create_task
        from schemas.task import TaskCreate
        from errors import ConflictError

        taken = int(task.task_code.split("-")[1])
        monkeypatch.setattr("crud.task.task_code_exists", lambda db, code: False)
        monkeypatch.setattr(codes.random, "randint", lambda a, b: taken)

        with pytest.raises(ConflictError):
            create_task(db_session, as_principal(admin), TaskCreate(project_id=project.id, title="Never"))

    def test_other_constraint_violations_are_not_retried(self, db_session: Session):
        """NOT NULL и прочие ограничения не выдаются за коллизию кода"""
        from sqlalchemy.exc import IntegrityError
        from models.project import ProjectDB

        built = []

        def build(code):
            built.append(code)
            return ProjectDB(name=None, project_code=code, created_by=1)

        with pytest.raises(IntegrityError):
            codes.create_with_unique_code(db_session, codes.PROJECT_PREFIX, lambda code: False, build,
                                          "project_code")
        assert len(built) == 1
        assert db_session.query(ProjectDB).count() == 0
