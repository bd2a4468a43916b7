import logging
from datetime import datetime, timedelta, timezone

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from tabook.config import JWT_SECRET, JWT_ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from tabook.database import get_db
from tabook.models.user import User
from tabook.utils.errors import Forbidden

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    try:
        return pwd_context.verify(plain_password, password_hash)
    except ValueError:
        # битый хеш в базе считаем несовпадением
        logger.warning("Не удалось проверить хеш пароля")
        return False


def create_access_token(user: User, expires_delta: timedelta | None = None) -> str:
    """
    Выдаёт JWT с полями {id, email, role}.
    Срок жизни ACCESS_TOKEN_EXPIRE_MINUTES, если не передан явно.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def get_token(token: str | None = Depends(oauth2_scheme)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Токен не предоставлен",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Недействительный или истёкший токен",
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_current_user(db: Session = Depends(get_db), token: str = Depends(get_token)) -> User:
    payload = decode_access_token(token)
    user_id = payload.get("id")
    user = db.get(User, user_id) if user_id is not None else None
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Недействительный или истёкший токен",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_teacher(user: User = Depends(get_current_user)) -> User:
    if not user.is_teacher:
        raise Forbidden("Действие доступно только преподавателю")
    return user


def ensure_self(user: User, user_id: int) -> None:
    if user.id != user_id:
        raise Forbidden("Нет доступа к данным другого пользователя")


def ensure_self_or_teacher(user: User, user_id: int) -> None:
    if user.id != user_id and not user.is_teacher:
        raise Forbidden("Нет доступа к данным другого пользователя")
