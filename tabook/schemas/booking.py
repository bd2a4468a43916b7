from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    # Обязательность и допустимые значения проверяет capacity.check_booking_fields,
    # чтобы вернуть понятное сообщение
    student_id: int = Field(alias="studentId")
    teacher_id: Optional[int] = Field(None, alias="teacherId")
    discipline: Optional[str] = None
    groups_count: Optional[int] = Field(None, alias="groupsCount")
    assistance_format: Optional[str] = Field("money", alias="assistanceFormat")
    start_date: Optional[date] = Field(None, alias="startDate")
    end_date: Optional[date] = Field(None, alias="endDate")
    program: Optional[str] = None

    class Config:
        populate_by_name = True


class BookingOut(BaseModel):
    id: int
    student_id: int
    teacher_id: int
    discipline: str
    groups_count: int
    assistance_format: str
    start_date: date
    end_date: date
    program: str
    active: bool
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class BookingCreated(BaseModel):
    success: bool = True
    booking: BookingOut


class BookingCancelled(BaseModel):
    success: bool = True
    message: str
    booking_id: int
    active: bool


class ProgramLoadOut(BaseModel):
    program: str
    groups: int


class ProgramAvailabilityOut(BaseModel):
    success: bool = True
    student_id: int
    program: str
    eligible: bool
    remaining_groups: int
    group_options: List[int] = []
    alternatives: List[str] = []
    booked_programs: List[ProgramLoadOut] = []


class StudentDiscipline(BaseModel):
    """Бронирование глазами студента: кто и на что забронировал."""
    id: int
    teacher_first_name: str
    teacher_last_name: str
    teacher_email: str
    discipline: str
    discipline_label: str
    groups_count: int
    assistance_format: str
    start_date: date
    end_date: date
    program: str
