import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from tabook.config import CORS_ORIGIN, LOG_LEVEL, HOST, PORT
from tabook.database import init_db
from tabook.routers import (
    auth as auth_router,
    bookings as bookings_router,
    catalog as catalog_router,
    students as students_router,
    users as users_router,
)
from tabook.utils.errors import DomainError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Понятные сообщения для полей, которые чаще всего приходят с ошибкой
FIELD_MESSAGES = {
    "email": "Неверный формат почты",
    "startDate": "Неверный формат даты",
    "endDate": "Неверный формат даты",
    "birthday": "Неверный формат даты",
    "role": "Указана недопустимая роль",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Таблицы базы данных созданы (или уже существуют)")
    yield


app = FastAPI(title="Бронирование ассистентов", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


def _error(status_code: int, message, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message}, headers=headers)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.detail)
    return _error(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = str(first.get("loc", ("",))[-1])
    if first.get("type") == "missing":
        message = f"Не заполнено обязательное поле: {field}"
    else:
        message = FIELD_MESSAGES.get(field, f"Некорректное значение поля {field}")
    logger.warning("%s %s -> 400: %s", request.method, request.url.path, message)
    return _error(400, message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Ошибка базы данных при %s %s", request.method, request.url.path)
    return _error(500, "Что-то пошло не так")


app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(students_router.router)
app.include_router(bookings_router.router)
app.include_router(catalog_router.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("tabook.main:app", host=HOST, port=PORT, reload=True)
