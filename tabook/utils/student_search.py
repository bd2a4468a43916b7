# tabook/utils/student_search.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from tabook.models.student_profile import StudentProfile
from tabook.models.user import User
from tabook.utils.capacity import BookingSummary, aggregate_bookings
from tabook.utils.eligibility import is_listed


@dataclass
class StudentMatch:
    user: User
    profile: StudentProfile
    summary: BookingSummary


def _norm(s: Optional[str]) -> str:
    return (s or "").strip()


_RATING_RE = re.compile(r"^\s*(\d+(?:[.,]\d+)?)")


def rating_value(edu_rating: Optional[str]) -> Optional[float]:
    """Число в начале рейтинга: "5 из 100" -> 5.0. Без числа -> None."""
    m = _RATING_RE.match(edu_rating or "")
    if not m:
        return None
    return float(m.group(1).replace(",", "."))


def search_students(
    db: Session,
    search: Optional[str] = None,
    faculty: Optional[str] = None,
    program: Optional[str] = None,
    rating: Optional[float] = None,
    discipline: Optional[str] = None,
) -> List[StudentMatch]:
    """
    Студенты с заполненной анкетой, которых ещё можно бронировать.

    Фильтры:
      search    : подстрока имени или фамилии без учёта регистра;
      faculty   : точное совпадение факультета;
      program   : точное совпадение образовательной программы студента;
      rating    : число в начале edu_rating ("N из M") не ниже заданного;
      discipline: основная или дополнительная дисциплина студента,
                  либо дополнительная не выбрана вовсе.
    Затем применяется общий лимит загрузки (eligibility.is_listed).
    """
    q = (
        db.query(User, StudentProfile)
        .join(StudentProfile, StudentProfile.user_id == User.id)
        .filter(User.role == "student", StudentProfile.questionnaire_completed.is_(True))
    )

    if _norm(search):
        pattern = f"%{_norm(search).lower()}%"
        q = q.filter(or_(func.lower(User.first_name).like(pattern), func.lower(User.last_name).like(pattern)))
    if _norm(faculty):
        q = q.filter(StudentProfile.faculty == _norm(faculty))
    if _norm(program):
        q = q.filter(StudentProfile.program == _norm(program))
    if _norm(discipline):
        d = _norm(discipline)
        q = q.filter(
            or_(
                StudentProfile.primary_discipline == d,
                StudentProfile.secondary_discipline == d,
                StudentProfile.secondary_discipline.is_(None),
            )
        )

    rows = q.order_by(User.id).all()
    summaries = aggregate_bookings(db, [user.id for user, _ in rows])

    matches = []
    for user, profile in rows:
        if rating is not None:
            value = rating_value(profile.edu_rating)
            if value is None or value < rating:
                continue
        summary = summaries.get(user.id, BookingSummary())
        if is_listed(summary):
            matches.append(StudentMatch(user=user, profile=profile, summary=summary))
    return matches


def distinct_faculties(db: Session, program: Optional[str] = None) -> List[str]:
    q = db.query(StudentProfile.faculty).filter(StudentProfile.faculty.isnot(None))
    if _norm(program):
        q = q.filter(StudentProfile.program == _norm(program))
    return [f for (f,) in q.distinct().order_by(StudentProfile.faculty).all() if f]


def distinct_programs(db: Session, faculty: Optional[str] = None) -> List[str]:
    q = db.query(StudentProfile.program).filter(StudentProfile.program.isnot(None))
    if _norm(faculty):
        q = q.filter(StudentProfile.faculty == _norm(faculty))
    return [p for (p,) in q.distinct().order_by(StudentProfile.program).all() if p]
