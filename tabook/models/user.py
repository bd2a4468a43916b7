from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from tabook.database import Base

ROLES = ("teacher", "student")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(10), nullable=False)  # teacher | student
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # 1:1, анкета есть только у студента
    profile = relationship(
        "StudentProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    student_bookings = relationship(
        "Booking",
        foreign_keys="Booking.student_id",
        back_populates="student",
        passive_deletes=True,
    )
    teacher_bookings = relationship(
        "Booking",
        foreign_keys="Booking.teacher_id",
        back_populates="teacher",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("role IN ('teacher', 'student')", name="ck_users_role"),
    )

    @property
    def is_teacher(self) -> bool:
        return self.role == "teacher"

    @property
    def is_student(self) -> bool:
        return self.role == "student"
