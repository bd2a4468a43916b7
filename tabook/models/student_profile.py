# tabook/models/student_profile.py
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, Text, JSON,
    ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship

from tabook.database import Base


class StudentProfile(Base):
    """
    Анкета студента-кандидата в ассистенты.
    Создаётся пустой при регистрации и заполняется анкетой / настройками.
    """
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    user = relationship("User", back_populates="profile")

    # контакты
    email = Column(String(100))
    telegram = Column(String(100))
    birthday = Column(Date)
    citizenship = Column(String(100))
    phone = Column(String(50))

    # обучение
    faculty = Column(String(100), index=True)
    program = Column(String(100), index=True)
    year = Column(Integer)
    debts = Column(String(100))
    # в формате формы: "5 из 100"
    edu_rating = Column(String(50))

    # результаты входных тестов (хранятся как есть, строкой)
    digital_literacy_score = Column(String(20))
    python_score = Column(String(20))
    data_analysis_score = Column(String(20))

    # дисциплины и желаемое число групп (1 | 2)
    primary_discipline = Column(String(100))
    primary_group_size = Column(Integer)
    secondary_discipline = Column(String(100))
    secondary_group_size = Column(Integer)

    # ответы на вопросы по дисциплинам
    data_analysis_answers = Column(JSON)
    python_programming_answers = Column(JSON)
    machine_learning_answers = Column(JSON)
    digital_literacy_answers = Column(JSON)

    # мотивация
    motivation_text = Column(Text)
    achievements = Column(Text)
    experience = Column(Text)

    # рекомендация
    recommendation_available = Column(Boolean, default=False)
    teacher_email = Column(String(255))

    questionnaire_completed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("year BETWEEN 1 AND 6", name="ck_profile_year"),
        CheckConstraint("primary_group_size IN (1, 2)", name="ck_profile_primary_groups"),
        CheckConstraint("secondary_group_size IN (1, 2)", name="ck_profile_secondary_groups"),
    )


# Поля, которые можно менять по разделам на странице настроек
PROFILE_SECTIONS = {
    "personal": ("email", "telegram", "birthday", "citizenship", "phone"),
    "education": ("faculty", "program", "year", "debts", "edu_rating"),
    "disciplines": ("primary_discipline", "primary_group_size", "secondary_discipline", "secondary_group_size"),
    "motivation": ("motivation_text", "achievements", "experience"),
    "recommendation": ("recommendation_available", "teacher_email"),
}
