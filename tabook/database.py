from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from tabook.config import DATABASE_URL

Base = declarative_base()


def use_immediate_transactions(engine):
    """
    Для SQLite: каждая транзакция начинается с BEGIN IMMEDIATE.

    SQLite не поддерживает SELECT ... FOR UPDATE, а драйвер sqlite3 сам
    открывает транзакцию только перед первой записью. Здесь блокировка
    записи берётся сразу, поэтому проверка лимита и вставка бронирования
    в параллельных сессиях выполняются строго по очереди.
    """
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


# Фолбэк на локальную SQLite, если переменная не задана
if not DATABASE_URL or not DATABASE_URL.strip():
    db_path = Path(__file__).with_name("app.db")
    engine = create_engine(f"sqlite:///{db_path}", connect_args={"check_same_thread": False})
else:
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)

if engine.dialect.name == "sqlite":
    use_immediate_transactions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None):
    """Создаёт таблицы, если их ещё нет."""
    from tabook import models  # noqa: F401  регистрирует модели в Base.metadata

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
