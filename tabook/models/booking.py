from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, ForeignKey, CheckConstraint, Index,
)
from sqlalchemy.orm import relationship

from tabook.database import Base

DISCIPLINES = ("data_analysis", "python_programming", "machine_learning", "digital_literacy")
ASSISTANCE_FORMATS = ("money", "credits")

# Сколько групп студент может вести по одной дисциплине и программе
MAX_GROUPS = 2


class Booking(Base):
    """Бронирование студента преподавателем. Удаляется только через active=False."""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    student = relationship("User", foreign_keys=[student_id], back_populates="student_bookings")

    teacher_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    teacher = relationship("User", foreign_keys=[teacher_id], back_populates="teacher_bookings")

    discipline = Column(String(100), nullable=False)
    groups_count = Column(Integer, nullable=False)
    assistance_format = Column(String(100), nullable=False, default="money")  # money | credits
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    program = Column(String(255), nullable=False)

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "discipline IN ('data_analysis', 'python_programming', 'machine_learning', 'digital_literacy')",
            name="ck_bookings_discipline",
        ),
        CheckConstraint("groups_count IN (1, 2)", name="ck_bookings_groups"),
        CheckConstraint("assistance_format IN ('money', 'credits')", name="ck_bookings_format"),
        CheckConstraint("end_date >= start_date", name="ck_bookings_dates"),
        Index("ix_bookings_student_active", "student_id", "active"),
    )
