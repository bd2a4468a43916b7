from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from tabook.database import get_db
from tabook.models.user import User
from tabook.schemas.booking import BookingCancelled, BookingCreate, BookingCreated, BookingOut
from tabook.schemas.student import BookedStudent, BookedStudentsResponse
from tabook.utils.auth import ensure_self, get_current_teacher, get_current_user
from tabook.utils.capacity import active_bookings_for_teacher, cancel_booking, reserve_booking
from tabook.utils.errors import Forbidden

router = APIRouter(prefix="/api", tags=["Bookings"])


@router.post("/bookings", status_code=status.HTTP_201_CREATED, response_model=BookingCreated)
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    teacher: User = Depends(get_current_teacher),
):
    """
    Бронирует студента текущим преподавателем.
    teacherId можно не передавать; переданный должен совпадать с текущим.
    """
    if payload.teacher_id is not None and payload.teacher_id != teacher.id:
        raise Forbidden("Нельзя бронировать от имени другого преподавателя")

    booking = reserve_booking(
        db,
        student_id=payload.student_id,
        teacher_id=teacher.id,
        discipline=payload.discipline,
        groups_count=payload.groups_count,
        assistance_format=payload.assistance_format,
        start_date=payload.start_date,
        end_date=payload.end_date,
        program=payload.program,
    )
    return BookingCreated(booking=BookingOut.model_validate(booking))


@router.delete("/bookings/{booking_id}", response_model=BookingCancelled)
def delete_booking(booking_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    """Отмена бронирования преподавателем или студентом. Повторный вызов не даёт ошибки."""
    booking = cancel_booking(db, booking_id, me)
    return BookingCancelled(
        message="Бронирование успешно удалено",
        booking_id=booking.id,
        active=booking.active,
    )


@router.get("/teachers/{teacher_id}/students", response_model=BookedStudentsResponse)
def teacher_students(teacher_id: int, db: Session = Depends(get_db), teacher: User = Depends(get_current_teacher)):
    """Активные бронирования преподавателя вместе с анкетами студентов."""
    ensure_self(teacher, teacher_id)
    students = [
        BookedStudent(
            **BookedStudent.fields_from(b.student, b.student.profile),
            booking_id=b.id,
            discipline=b.discipline,
            program=b.program,
            groups_count=b.groups_count,
            assistance_format=b.assistance_format,
            start_date=b.start_date,
            end_date=b.end_date,
        )
        for b in active_bookings_for_teacher(db, teacher_id)
    ]
    return BookedStudentsResponse(students=students)
