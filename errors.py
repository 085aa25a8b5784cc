from typing import Any, Optional

from fastapi import status


class TrackerError(Exception):
    """Базовая ошибка предметной области"""
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(TrackerError):
    """Некорректные входные данные, состояние не менялось"""
    kind = "validation"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(TrackerError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(TrackerError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(TrackerError):
    """Дубликат заявки, пользователь уже назначен, заявка уже обработана"""
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class PartialFailureError(TrackerError):
    """Запись не сохранилась целиком; повтор операции безопасен"""
    kind = "partial_failure"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
