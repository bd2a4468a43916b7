# tabook/utils/capacity.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from tabook.models.booking import Booking, DISCIPLINES, ASSISTANCE_FORMATS, MAX_GROUPS
from tabook.models.user import User
from tabook.utils.errors import BookingValidationError, CapacityExceeded, Forbidden, NotFound

logger = logging.getLogger(__name__)


# --------------------- Агрегатор ---------------------

@dataclass
class ProgramLoad:
    program: str
    groups: int


@dataclass
class BookingSummary:
    """Активная загрузка студента: сколько групп занято по каждой программе."""
    program_details: List[ProgramLoad] = field(default_factory=list)

    @property
    def program_count(self) -> int:
        return len(self.program_details)

    @property
    def total_groups(self) -> int:
        return sum(p.groups for p in self.program_details)

    def groups_for(self, program: str) -> int:
        return next((p.groups for p in self.program_details if p.program == program), 0)

    def as_dict(self) -> dict:
        return {
            "program_details": [{"program": p.program, "groups": p.groups} for p in self.program_details],
            "program_count": self.program_count,
            "total_groups": self.total_groups,
        }


def aggregate_bookings(db: Session, student_ids: Optional[Iterable[int]] = None) -> Dict[int, BookingSummary]:
    """
    Возвращает {student_id: BookingSummary} по активным бронированиям.

    Группы суммируются по паре (student_id, program) без учёта дисциплины.
    Студенты без активных бронирований в результат не попадают.
    Ничего не кэшируется: данные могут измениться между вызовами.
    """
    q = (
        db.query(
            Booking.student_id,
            Booking.program,
            func.sum(Booking.groups_count).label("groups"),
        )
        .filter(Booking.active.is_(True))
    )
    if student_ids is not None:
        ids = list(student_ids)
        if not ids:
            return {}
        q = q.filter(Booking.student_id.in_(ids))

    rows = (
        q.group_by(Booking.student_id, Booking.program)
        .order_by(Booking.student_id, Booking.program)
        .all()
    )

    summaries: Dict[int, BookingSummary] = {}
    for student_id, program, groups in rows:
        summaries.setdefault(student_id, BookingSummary()).program_details.append(
            ProgramLoad(program=program, groups=int(groups or 0))
        )
    return summaries


def get_summary(db: Session, student_id: int) -> BookingSummary:
    return aggregate_bookings(db, [student_id]).get(student_id, BookingSummary())


# --------------------- Проверка лимита групп ---------------------

@dataclass
class CapacityVerdict:
    allowed: bool
    current_groups: int
    available_groups: int
    reason: Optional[str] = None


def groups_word(n: int) -> str:
    return "группа" if n == 1 else "группы"


def evaluate_capacity(current_groups: int, requested_groups: int) -> CapacityVerdict:
    """
    Решает, можно ли добавить requested_groups к уже занятым current_groups.
    requested_groups вне {1, 2} считается ошибкой вызывающего кода (ValueError).
    """
    if requested_groups not in (1, 2):
        raise ValueError(f"Количество групп должно быть 1 или 2, получено: {requested_groups}")

    available = max(MAX_GROUPS - current_groups, 0)
    if current_groups + requested_groups > MAX_GROUPS:
        reason = (
            f"Студент уже имеет {current_groups} групп для данной дисциплины и программы. "
            f"Доступно для бронирования: {available} {groups_word(available)}"
        )
        return CapacityVerdict(False, current_groups, available, reason)
    return CapacityVerdict(True, current_groups, available)


def current_groups(db: Session, student_id: int, discipline: str, program: str) -> int:
    """Сумма групп по активным бронированиям с той же дисциплиной и программой."""
    total = (
        db.query(func.coalesce(func.sum(Booking.groups_count), 0))
        .filter(
            Booking.student_id == student_id,
            Booking.discipline == discipline,
            Booking.program == program,
            Booking.active.is_(True),
        )
        .scalar()
    )
    return int(total or 0)


def can_book(db: Session, student_id: int, discipline: str, program: str, requested_groups: int) -> CapacityVerdict:
    return evaluate_capacity(current_groups(db, student_id, discipline, program), requested_groups)


# --------------------- Создание и отмена ---------------------

def check_booking_fields(
    discipline: Optional[str],
    groups_count: Optional[int],
    assistance_format: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
    program: Optional[str],
) -> None:
    """Проверки, которые выполняются до обращения к лимитам."""
    if not start_date or not end_date:
        raise BookingValidationError("Укажите даты начала и окончания")
    if not program or not program.strip():
        raise BookingValidationError("Укажите образовательную программу")
    if end_date < start_date:
        raise BookingValidationError("Дата окончания не может быть раньше даты начала")
    if discipline not in DISCIPLINES:
        raise BookingValidationError("Укажите дисциплину")
    if groups_count not in (1, 2):
        raise BookingValidationError("Количество групп должно быть 1 или 2")
    if assistance_format not in ASSISTANCE_FORMATS:
        raise BookingValidationError("Укажите формат ассистирования: деньги или кредиты")


def reserve_booking(
    db: Session,
    *,
    student_id: int,
    teacher_id: int,
    discipline: str,
    groups_count: int,
    assistance_format: str,
    start_date: date,
    end_date: date,
    program: str,
) -> Booking:
    """
    Проверяет лимит и создаёт бронирование в одной транзакции.

    Строка студента в users блокируется (SELECT ... FOR UPDATE) до COMMIT,
    поэтому параллельные запросы на одного студента выполняются по очереди
    и не могут вместе превысить лимит групп. На SQLite ту же роль играет
    BEGIN IMMEDIATE (database.use_immediate_transactions).
    """
    program = program.strip() if program else program
    check_booking_fields(discipline, groups_count, assistance_format, start_date, end_date, program)

    try:
        student = (
            db.query(User)
            .filter(User.id == student_id)
            .with_for_update()
            .one_or_none()
        )
        if not student or not student.is_student:
            raise NotFound("Студент не найден")

        teacher = db.get(User, teacher_id)
        if not teacher or not teacher.is_teacher:
            raise NotFound("Преподаватель не найден")

        verdict = can_book(db, student_id, discipline, program, groups_count)
        if not verdict.allowed:
            logger.info(
                "Бронирование отклонено: student=%s discipline=%s program=%r current=%s requested=%s",
                student_id, discipline, program, verdict.current_groups, groups_count,
            )
            raise CapacityExceeded(verdict)

        booking = Booking(
            student_id=student_id,
            teacher_id=teacher_id,
            discipline=discipline,
            groups_count=groups_count,
            assistance_format=assistance_format,
            start_date=start_date,
            end_date=end_date,
            program=program,
            active=True,
        )
        db.add(booking)
        db.commit()
    except (NotFound, CapacityExceeded):
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Ошибка при сохранении бронирования student=%s", student_id)
        raise

    db.refresh(booking)
    logger.info(
        "Бронирование #%s: student=%s teacher=%s discipline=%s program=%r groups=%s",
        booking.id, student_id, teacher_id, discipline, program, groups_count,
    )
    return booking


def cancel_booking(db: Session, booking_id: int, actor: User) -> Booking:
    """
    Мягкое удаление: active=False. Повторная отмена ничего не меняет.
    Отменить может только преподаватель или студент из этого бронирования.
    """
    booking = db.get(Booking, booking_id)
    if not booking:
        raise NotFound("Бронирование не найдено")
    if actor.id not in (booking.teacher_id, booking.student_id):
        raise Forbidden("Нельзя отменить чужое бронирование")

    if booking.active:
        booking.active = False
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        logger.info("Бронирование #%s отменено пользователем %s", booking.id, actor.id)
    return booking


# --------------------- Списки бронирований ---------------------

def active_bookings_for_teacher(db: Session, teacher_id: int) -> List[Booking]:
    return (
        db.query(Booking)
        .options(joinedload(Booking.student).joinedload(User.profile))
        .filter(Booking.teacher_id == teacher_id, Booking.active.is_(True))
        .order_by(Booking.start_date, Booking.id)
        .all()
    )


def active_bookings_for_student(db: Session, student_id: int) -> List[Booking]:
    return (
        db.query(Booking)
        .options(joinedload(Booking.teacher))
        .filter(Booking.student_id == student_id, Booking.active.is_(True))
        .order_by(Booking.start_date, Booking.id)
        .all()
    )
