from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tabook.database import get_db
from tabook.models.student_profile import StudentProfile, PROFILE_SECTIONS
from tabook.models.user import User
from tabook.schemas.booking import ProgramAvailabilityOut, ProgramLoadOut, StudentDiscipline
from tabook.schemas.profile import ProfileOut, ProfileSectionUpdate, QuestionnaireStatus, QuestionnaireSubmit
from tabook.schemas.student import StudentSearchItem, StudentSearchResponse
from tabook.utils.auth import ensure_self, ensure_self_or_teacher, get_current_teacher, get_current_user
from tabook.utils.capacity import active_bookings_for_student, get_summary
from tabook.utils.catalog import discipline_labels
from tabook.utils.eligibility import program_availability
from tabook.utils.errors import NotFound
from tabook.utils.student_search import search_students

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/students", tags=["Students"])


def _profile_or_404(db: Session, student_id: int) -> StudentProfile:
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == student_id).first()
    if not profile:
        raise NotFound("Профиль студента не найден")
    return profile


def _recommendation(value, current: Optional[bool]) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if value == "yes":
        return True
    if value == "no":
        return False
    return current


@router.get("", response_model=StudentSearchResponse)
def list_students(
    search: Optional[str] = None,
    faculty: Optional[str] = None,
    program: Optional[str] = None,
    rating: Optional[float] = None,
    discipline: Optional[str] = None,
    db: Session = Depends(get_db),
    teacher: User = Depends(get_current_teacher),
):
    """
    Поиск студентов для бронирования.
    Каждый студент дополнен booked_programs: занятые группы по программам.
    """
    matches = search_students(
        db, search=search, faculty=faculty, program=program, rating=rating, discipline=discipline,
    )
    students = [
        StudentSearchItem(
            **StudentSearchItem.fields_from(m.user, m.profile),
            booked_programs=[ProgramLoadOut(program=p.program, groups=p.groups) for p in m.summary.program_details],
        )
        for m in matches
    ]
    return StudentSearchResponse(students=students)


@router.get("/{student_id}/questionnaire", response_model=QuestionnaireStatus)
def questionnaire_status(student_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self(me, student_id)
    profile = db.query(StudentProfile).filter(StudentProfile.user_id == student_id).first()
    return QuestionnaireStatus(questionnaire_completed=bool(profile and profile.questionnaire_completed))


@router.post("/{student_id}/questionnaire")
def submit_questionnaire(
    student_id: int,
    payload: QuestionnaireSubmit,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    """
    Сохраняет анкету целиком и отмечает её заполненной.
    Повторная отправка перезаписывает все поля.
    """
    ensure_self(me, student_id)
    profile = _profile_or_404(db, student_id)

    data = payload.model_dump(exclude={"recommendation_available"})
    try:
        for field, value in data.items():
            setattr(profile, field, value)
        profile.recommendation_available = _recommendation(
            payload.recommendation_available, profile.recommendation_available,
        )
        profile.questionnaire_completed = True
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Ошибка сохранения анкеты студента #%s", student_id)
        raise

    logger.info("Студент #%s заполнил анкету", student_id)
    return {"success": True}


@router.get("/{student_id}/profile")
def get_profile(student_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self_or_teacher(me, student_id)
    profile = _profile_or_404(db, student_id)
    return {"success": True, "profile": ProfileOut.model_validate(profile)}


@router.put("/{student_id}/profile")
def update_profile_section(
    student_id: int,
    payload: ProfileSectionUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    """
    Обновляет один раздел анкеты: personal, education, disciplines,
    motivation или recommendation. Поля других разделов игнорируются.
    """
    ensure_self(me, student_id)

    fields = PROFILE_SECTIONS.get(payload.section, ())
    updates = {f: getattr(payload, f) for f in fields if f in payload.model_fields_set}
    if not updates:
        raise HTTPException(status_code=400, detail="Обновлять нечего")

    profile = _profile_or_404(db, student_id)
    try:
        for field, value in updates.items():
            setattr(profile, field, value)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Ошибка обновления раздела %s анкеты студента #%s", payload.section, student_id)
        raise

    db.refresh(profile)
    return {"success": True, "profile": ProfileOut.model_validate(profile)}


@router.get("/{student_id}/availability", response_model=ProgramAvailabilityOut)
def program_options(
    student_id: int,
    program: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    teacher: User = Depends(get_current_teacher),
):
    """Сколько групп можно забронировать у студента по выбранной программе."""
    student = db.get(User, student_id)
    if not student or not student.is_student:
        raise NotFound("Студент не найден")

    summary = get_summary(db, student_id)
    availability = program_availability(summary, program.strip())
    return ProgramAvailabilityOut(
        student_id=student_id,
        program=availability.program,
        eligible=availability.eligible,
        remaining_groups=availability.remaining_groups,
        group_options=availability.group_options,
        alternatives=availability.alternatives,
        booked_programs=[ProgramLoadOut(program=p.program, groups=p.groups) for p in summary.program_details],
    )


@router.get("/{student_id}/disciplines")
def student_disciplines(student_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    """Активные бронирования студента с данными преподавателя."""
    ensure_self_or_teacher(me, student_id)
    labels = discipline_labels()
    disciplines = [
        StudentDiscipline(
            id=b.id,
            teacher_first_name=b.teacher.first_name,
            teacher_last_name=b.teacher.last_name,
            teacher_email=b.teacher.email,
            discipline=b.discipline,
            discipline_label=labels.get(b.discipline, b.discipline),
            groups_count=b.groups_count,
            assistance_format=b.assistance_format,
            start_date=b.start_date,
            end_date=b.end_date,
            program=b.program,
        )
        for b in active_bookings_for_student(db, student_id)
    ]
    return {"success": True, "disciplines": disciplines}
