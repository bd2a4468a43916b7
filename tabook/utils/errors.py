from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tabook.utils.capacity import CapacityVerdict


class DomainError(Exception):
    """Базовая ошибка бизнес-логики. HTTP-код выставляется в main.py."""
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BookingValidationError(DomainError):
    status_code = 400


class CapacityExceeded(DomainError):
    """Бронирование превысило лимит групп по дисциплине и программе."""
    status_code = 400

    def __init__(self, verdict: "CapacityVerdict"):
        self.verdict = verdict
        super().__init__(verdict.reason or "Превышен лимит групп")


class NotFound(DomainError):
    status_code = 404


class Forbidden(DomainError):
    status_code = 403


class Conflict(DomainError):
    status_code = 409
