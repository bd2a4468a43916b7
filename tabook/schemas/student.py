from datetime import date
from typing import List, Optional

from pydantic import BaseModel

from tabook.schemas.booking import ProgramLoadOut


class StudentCard(BaseModel):
    """Студент в результатах поиска / списке преподавателя."""
    id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    telegram: Optional[str] = None
    birthday: Optional[date] = None
    citizenship: Optional[str] = None
    phone: Optional[str] = None
    faculty: Optional[str] = None
    edu_program: Optional[str] = None
    year: Optional[int] = None
    debts: Optional[str] = None
    edu_rating: Optional[str] = None
    digital_literacy_score: Optional[str] = None
    python_score: Optional[str] = None
    data_analysis_score: Optional[str] = None
    primary_discipline: Optional[str] = None
    primary_group_size: Optional[int] = None
    secondary_discipline: Optional[str] = None
    secondary_group_size: Optional[int] = None
    digital_literacy_answers: Optional[List[str]] = None
    data_analysis_answers: Optional[List[str]] = None
    python_programming_answers: Optional[List[str]] = None
    machine_learning_answers: Optional[List[str]] = None
    motivation_text: Optional[str] = None
    achievements: Optional[str] = None
    experience: Optional[str] = None
    teacher_email: Optional[str] = None

    @staticmethod
    def fields_from(user, profile) -> dict:
        """Склеивает пользователя и анкету; программа студента идёт как edu_program."""
        data = {"id": user.id, "first_name": user.first_name, "last_name": user.last_name}
        if profile is None:
            return data
        for name in StudentCard.model_fields:
            if name in data or name == "edu_program":
                continue
            data[name] = getattr(profile, name, None)
        data["edu_program"] = profile.program
        return data


class StudentSearchItem(StudentCard):
    booked_programs: List[ProgramLoadOut] = []


class StudentSearchResponse(BaseModel):
    success: bool = True
    students: List[StudentSearchItem]


class BookedStudent(StudentCard):
    """Строка списка «мои ассистенты» у преподавателя."""
    booking_id: int
    discipline: str
    program: str
    groups_count: int
    assistance_format: str
    start_date: date
    end_date: date


class BookedStudentsResponse(BaseModel):
    success: bool = True
    students: List[BookedStudent]
