"""Генерация человекочитаемых кодов вида PROJ-1234 / TASK-1234."""
import logging
import random
import time
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import CODE_MAX_ATTEMPTS, CODE_INSERT_ATTEMPTS
from errors import ConflictError

logger = logging.getLogger(__name__)

PROJECT_PREFIX = "PROJ"
TASK_PREFIX = "TASK"

T = TypeVar('T')


def normalize_code(code: str) -> str:
    return code.strip().upper()


def generate_code(prefix: str, exists_check: Callable[[str], bool],
                  max_attempts: int = CODE_MAX_ATTEMPTS) -> str:
    """Сгенерировать свободный код.

    Пробует не более max_attempts случайных суффиксов 1000-9999. Если все
    заняты, возвращает код из последних шести цифр текущего времени в мс
    без повторной проверки.
    """
    for _ in range(max_attempts):
        code = f"{prefix}-{random.randint(1000, 9999)}"
        if not exists_check(code):
            return code
    fallback = f"{prefix}-{str(int(time.time() * 1000))[-6:]}"
    logger.warning(f"{max_attempts} random {prefix} codes collided, falling back to {fallback}")
    return fallback


def create_with_unique_code(
        db: Session,
        prefix: str,
        exists_check: Callable[[str], bool],
        build: Callable[[str], T],
        code_column: str,
        max_inserts: int = CODE_INSERT_ATTEMPTS
) -> T:
    """Вставить сущность с новым кодом.

    Нарушение уникальности по колонке code_column (параллельное создание
    с тем же кодом) считается повторяемой ситуацией: откат и новый код.
    Остальные нарушения ограничений пробрасываются как есть.
    """
    for attempt in range(1, max_inserts + 1):
        code = generate_code(prefix, exists_check)
        db_obj = build(code)
        db.add(db_obj)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if code_column not in str(e.orig):
                raise
            logger.warning(f"Code {code} taken at insert time (attempt {attempt}/{max_inserts})")
            continue
        db.refresh(db_obj)
        return db_obj
    raise ConflictError(f"Could not allocate a unique {prefix} code, try again")
