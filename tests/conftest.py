from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tabook.database import Base, get_db
from tabook.main import app
from tabook.models import Booking, StudentProfile, User
from tabook.utils.auth import create_access_token, get_password_hash

# Один хеш на все тесты: bcrypt медленный
PASSWORD = "secret123"
PASSWORD_HASH = get_password_hash(PASSWORD)

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture(scope="function")
def db():
    """Чистая in-memory база на каждый тест."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    yield session
    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db):
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def make_teacher(db):
    counter = {"n": 0}

    def _make(first_name="Анна", last_name="Петрова", email=None):
        counter["n"] += 1
        user = User(
            email=email or f"teacher{counter['n']}@example.com",
            password_hash=PASSWORD_HASH,
            first_name=first_name,
            last_name=last_name,
            role="teacher",
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_student(db):
    counter = {"n": 0}

    def _make(first_name="Ivan", last_name="Ivanov", email=None, completed=True, **profile_fields):
        counter["n"] += 1
        user = User(
            email=email or f"student{counter['n']}@example.com",
            password_hash=PASSWORD_HASH,
            first_name=first_name,
            last_name=last_name,
            role="student",
        )
        defaults = {
            "faculty": "ФКН",
            "program": "Экономика",
            "year": 2,
            "edu_rating": "80 из 100",
            "primary_discipline": "python_programming",
            "primary_group_size": 2,
        }
        defaults.update(profile_fields)
        user.profile = StudentProfile(questionnaire_completed=completed, **defaults)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def add_booking(db):
    """Вставляет бронирование напрямую, минуя проверку лимитов."""

    def _add(student, teacher, program="X", discipline="python_programming", groups=1, active=True):
        booking = Booking(
            student_id=student.id,
            teacher_id=teacher.id,
            discipline=discipline,
            groups_count=groups,
            assistance_format="money",
            start_date=date(2025, 9, 1),
            end_date=date(2025, 12, 20),
            program=program,
            active=active,
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    return _add


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest.fixture
def headers():
    return auth_headers
