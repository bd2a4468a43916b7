from datetime import timedelta

from tabook.config import TEACHER_PASSCODE
from tabook.models import StudentProfile, User
from tabook.utils.auth import create_access_token

from conftest import PASSWORD


def _register(client, **overrides):
    payload = {
        "email": "new.student@example.com",
        "password": "qwerty1",
        "first_name": "Мария",
        "last_name": "Смирнова",
        "role": "student",
    }
    payload.update(overrides)
    return client.post("/api/register", json=payload)


def test_register_student_creates_empty_profile(client, db):
    r = _register(client)
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["role"] == "student"
    assert body["token"]

    profile = db.query(StudentProfile).filter(StudentProfile.user_id == body["id"]).one()
    assert profile.questionnaire_completed is False

    r = client.get("/api/validate-session", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.json()["user"] == {"id": body["id"], "email": "new.student@example.com", "role": "student"}


def test_register_teacher_requires_passcode(client, db):
    r = _register(client, email="t@example.com", role="teacher", teacher_code="wrong")
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Неверный код преподавателя"}

    r = _register(client, email="t@example.com", role="teacher", teacher_code=TEACHER_PASSCODE)
    assert r.status_code == 201
    user = db.query(User).filter(User.email == "t@example.com").one()
    assert user.role == "teacher"
    assert user.profile is None


def test_register_rejects_bad_input(client):
    r = _register(client, password="123")
    assert r.status_code == 400
    assert r.json()["message"] == "Пароль должен быть не менее 6 символов"

    r = _register(client, email="not-an-email")
    assert r.status_code == 400
    assert r.json()["message"] == "Неверный формат почты"

    r = _register(client, role="admin")
    assert r.status_code == 400
    assert r.json()["message"] == "Указана недопустимая роль"


def test_register_duplicate_email(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 409
    assert r.json()["message"] == "Пользователь с этой почтой уже существует"


def test_login(client, make_teacher):
    teacher = make_teacher(email="login@example.com")

    r = client.post("/api/login", json={"email": "login@example.com", "password": PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == teacher.id
    assert "password_hash" not in body
    assert body["token"]

    r = client.post("/api/login", json={"email": "login@example.com", "password": "wrong-pass"})
    assert r.status_code == 401

    r = client.post("/api/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert r.status_code == 404


def test_token_required_and_checked(client, make_teacher):
    r = client.get("/api/validate-session")
    assert r.status_code == 401
    assert r.json()["message"] == "Токен не предоставлен"

    r = client.get("/api/validate-session", headers={"Authorization": "Bearer garbage"})
    assert r.status_code == 401

    expired = create_access_token(make_teacher(), expires_delta=timedelta(minutes=-1))
    r = client.get("/api/validate-session", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == "Недействительный или истёкший токен"
