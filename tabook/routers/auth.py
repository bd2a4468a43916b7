import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tabook.config import TEACHER_PASSCODE
from tabook.database import get_db
from tabook.models.student_profile import StudentProfile
from tabook.models.user import User
from tabook.schemas.user import UserCreate, LoginRequest, UserResponse
from tabook.utils.auth import (
    create_access_token, decode_access_token, get_password_hash, verify_password, get_token,
)
from tabook.utils.errors import Conflict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])

MIN_PASSWORD_LENGTH = 6


def _auth_payload(user: User) -> dict:
    return {
        "success": True,
        **UserResponse.model_validate(user).model_dump(),
        "token": create_access_token(user),
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(get_db)):
    """
    Регистрирует преподавателя или студента.
    Студенту сразу создаётся пустая анкета (questionnaire_completed = False).
    """
    if not payload.password or not payload.first_name.strip() or not payload.last_name.strip():
        raise HTTPException(status_code=400, detail="Все поля обязательны")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Пароль должен быть не менее 6 символов")
    if payload.role == "teacher" and payload.teacher_code != TEACHER_PASSCODE:
        raise HTTPException(status_code=400, detail="Неверный код преподавателя")

    if db.query(User).filter(User.email == payload.email).first():
        raise Conflict("Пользователь с этой почтой уже существует")

    user = User(
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        role=payload.role,
    )
    if payload.role == "student":
        user.profile = StudentProfile(questionnaire_completed=False)

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Пользователь с этой почтой уже существует")
    db.refresh(user)
    logger.info("Зарегистрирован пользователь #%s (%s)", user.id, user.role)
    return _auth_payload(user)


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Электронная почта и пароль обязательны")

    user = db.query(User).filter(User.email == payload.email).first()
    if not user:
        raise HTTPException(status_code=404, detail="Пользователь не найден")
    if not verify_password(payload.password, user.password_hash):
        logger.warning("Неудачная попытка входа для пользователя #%s", user.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Неверный логин или пароль")

    return _auth_payload(user)


@router.get("/validate-session")
def validate_session(token: str = Depends(get_token)):
    """Проверяет токен и возвращает его содержимое {id, email, role}."""
    claims = decode_access_token(token)
    return {
        "success": True,
        "message": "Сессия действительна",
        "user": {"id": claims.get("id"), "email": claims.get("email"), "role": claims.get("role")},
    }
