from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

Discipline = Literal["data_analysis", "python_programming", "machine_learning", "digital_literacy"]


class QuestionnaireSubmit(BaseModel):
    """
    Полная анкета студента. Принимает ключи формы (camelCase) и snake_case.
    Пустые строки считаются незаполненными полями.
    """
    email: Optional[str] = None
    telegram: Optional[str] = None
    birthday: Optional[date] = None
    citizenship: Optional[str] = None
    phone: Optional[str] = None

    faculty: Optional[str] = None
    program: Optional[str] = None
    year: Optional[int] = Field(None, ge=1, le=6)
    debts: Optional[str] = None
    edu_rating: Optional[str] = Field(None, max_length=50)

    primary_discipline: Optional[Discipline] = Field(None, alias="primaryDiscipline")
    primary_group_size: Optional[Literal[1, 2]] = Field(None, alias="primaryGroupSize")
    secondary_discipline: Optional[Discipline] = Field(None, alias="secondaryDiscipline")
    secondary_group_size: Optional[Literal[1, 2]] = Field(None, alias="secondaryGroupSize")

    motivation_text: Optional[str] = Field(None, alias="motivationText")
    achievements: Optional[str] = None
    experience: Optional[str] = None

    # "yes" | "no" из формы; другое значение оставляет прежнее
    recommendation_available: Optional[Union[bool, str]] = Field(None, alias="recommendationAvailable")
    teacher_email: Optional[str] = Field(None, alias="teacherEmail")

    data_analysis_answers: Optional[List[str]] = Field(None, alias="dataAnalysisAnswers")
    python_programming_answers: Optional[List[str]] = Field(None, alias="pythonProgrammingAnswers")
    machine_learning_answers: Optional[List[str]] = Field(None, alias="machineLearningAnswers")
    digital_literacy_answers: Optional[List[str]] = Field(None, alias="digitalLiteracyAnswers")

    digital_literacy_score: Optional[str] = Field(None, alias="digitalliteracyscore")
    python_score: Optional[str] = Field(None, alias="pythonscore")
    data_analysis_score: Optional[str] = Field(None, alias="dataanalysisscore")

    class Config:
        populate_by_name = True

    @field_validator("*", mode="before")
    @classmethod
    def _empty_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("edu_rating", "digital_literacy_score", "python_score", "data_analysis_score", mode="before")
    @classmethod
    def _number_to_str(cls, v):
        if v is None:
            return None
        return str(v)


class QuestionnaireStatus(BaseModel):
    success: bool = True
    questionnaire_completed: bool


class ProfileOut(BaseModel):
    id: int
    user_id: int
    email: Optional[str] = None
    telegram: Optional[str] = None
    birthday: Optional[date] = None
    citizenship: Optional[str] = None
    phone: Optional[str] = None
    faculty: Optional[str] = None
    program: Optional[str] = None
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
    data_analysis_answers: Optional[List[str]] = None
    python_programming_answers: Optional[List[str]] = None
    machine_learning_answers: Optional[List[str]] = None
    digital_literacy_answers: Optional[List[str]] = None
    motivation_text: Optional[str] = None
    achievements: Optional[str] = None
    experience: Optional[str] = None
    recommendation_available: Optional[bool] = None
    teacher_email: Optional[str] = None
    questionnaire_completed: bool
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True


class ProfileSectionUpdate(BaseModel):
    """Изменение одного раздела анкеты со страницы настроек."""
    section: str

    email: Optional[str] = None
    telegram: Optional[str] = None
    birthday: Optional[date] = None
    citizenship: Optional[str] = None
    phone: Optional[str] = None

    faculty: Optional[str] = None
    program: Optional[str] = None
    year: Optional[int] = Field(None, ge=1, le=6)
    debts: Optional[str] = None
    edu_rating: Optional[str] = Field(None, max_length=50)

    primary_discipline: Optional[Discipline] = None
    primary_group_size: Optional[Literal[1, 2]] = None
    secondary_discipline: Optional[Discipline] = None
    secondary_group_size: Optional[Literal[1, 2]] = None

    motivation_text: Optional[str] = None
    achievements: Optional[str] = None
    experience: Optional[str] = None

    recommendation_available: Optional[bool] = None
    teacher_email: Optional[str] = None
