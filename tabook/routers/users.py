import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from tabook.database import get_db
from tabook.models.user import User
from tabook.routers.auth import MIN_PASSWORD_LENGTH
from tabook.schemas.user import UserResponse, UserUpdate
from tabook.utils.auth import ensure_self, get_current_user, get_password_hash
from tabook.utils.errors import Conflict, NotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}")
def get_user(user_id: int, db: Session = Depends(get_db), me: User = Depends(get_current_user)):
    ensure_self(me, user_id)
    user = db.get(User, user_id)
    if not user:
        raise NotFound("Пользователь не найден")
    return {"success": True, "user": UserResponse.model_validate(user)}


@router.put("/{user_id}")
def update_user(
    user_id: int,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    """
    Меняет почту, пароль и имя. Передаются только изменяемые поля.
    Всё или ничего: при ошибке изменения откатываются.
    """
    ensure_self(me, user_id)

    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v}
    if not changes:
        raise HTTPException(status_code=400, detail="Обновлять нечего")
    if "password" in changes and len(changes["password"]) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Пароль должен быть не менее 6 символов")

    user = db.get(User, user_id)
    if not user:
        raise NotFound("Пользователь не найден")

    try:
        if "email" in changes and changes["email"] != user.email:
            taken = db.query(User.id).filter(User.email == changes["email"], User.id != user_id).first()
            if taken:
                raise Conflict("Пользователь с этой почтой уже существует")
            user.email = changes["email"]
        if "password" in changes:
            user.password_hash = get_password_hash(changes["password"])
        if "first_name" in changes:
            user.first_name = changes["first_name"].strip()
        if "last_name" in changes:
            user.last_name = changes["last_name"].strip()
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Пользователь с этой почтой уже существует")
    except (Conflict, SQLAlchemyError):
        db.rollback()
        raise

    db.refresh(user)
    logger.info("Пользователь #%s обновил данные: %s", user.id, sorted(changes))
    return {"success": True, "user": UserResponse.model_validate(user)}
