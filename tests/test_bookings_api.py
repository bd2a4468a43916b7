from tabook.models import Booking


def _booking_payload(student, **overrides):
    payload = {
        "studentId": student.id,
        "discipline": "python_programming",
        "groupsCount": 1,
        "assistanceFormat": "money",
        "startDate": "2025-09-01",
        "endDate": "2025-12-20",
        "program": "X",
    }
    payload.update(overrides)
    return payload


def test_book_search_and_reject_end_to_end(client, make_teacher, make_student, headers):
    teacher = make_teacher()
    student = make_student()

    r = client.post("/api/bookings", json=_booking_payload(student), headers=headers(teacher))
    assert r.status_code == 201
    booking = r.json()["booking"]
    assert booking["teacher_id"] == teacher.id
    assert booking["active"] is True

    r = client.get("/api/students", headers=headers(teacher))
    assert r.status_code == 200
    listed = {s["id"]: s for s in r.json()["students"]}
    assert listed[student.id]["booked_programs"] == [{"program": "X", "groups": 1}]

    r = client.post("/api/bookings", json=_booking_payload(student, groupsCount=2), headers=headers(teacher))
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == (
        "Студент уже имеет 1 групп для данной дисциплины и программы. "
        "Доступно для бронирования: 1 группа"
    )


def test_teacher_id_defaults_to_current_teacher(client, make_teacher, make_student, headers):
    teacher, other = make_teacher(), make_teacher()
    student = make_student()

    r = client.post(
        "/api/bookings", json=_booking_payload(student, teacherId=teacher.id), headers=headers(teacher),
    )
    assert r.status_code == 201

    r = client.post(
        "/api/bookings", json=_booking_payload(student, teacherId=other.id), headers=headers(teacher),
    )
    assert r.status_code == 403


def test_only_teachers_can_book(client, make_student, headers):
    student = make_student()
    r = client.post("/api/bookings", json=_booking_payload(student), headers=headers(student))
    assert r.status_code == 403


def test_booking_validation_errors(client, make_teacher, make_student, headers):
    teacher, student = make_teacher(), make_student()

    r = client.post("/api/bookings", json=_booking_payload(student, startDate=None), headers=headers(teacher))
    assert r.status_code == 400
    assert r.json()["message"] == "Укажите даты начала и окончания"

    r = client.post("/api/bookings", json=_booking_payload(student, program=""), headers=headers(teacher))
    assert r.json()["message"] == "Укажите образовательную программу"

    r = client.post(
        "/api/bookings", json=_booking_payload(student, endDate="2025-01-01"), headers=headers(teacher),
    )
    assert r.json()["message"] == "Дата окончания не может быть раньше даты начала"

    r = client.post(
        "/api/bookings", json=_booking_payload(student, startDate="01/09/2025"), headers=headers(teacher),
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Неверный формат даты"

    r = client.post("/api/bookings", json=_booking_payload(student, studentId=9999), headers=headers(teacher))
    assert r.status_code == 404


def test_delete_is_soft_and_idempotent(client, db, make_teacher, make_student, headers):
    teacher, student = make_teacher(), make_student()
    r = client.post("/api/bookings", json=_booking_payload(student, groupsCount=2), headers=headers(teacher))
    booking_id = r.json()["booking"]["id"]

    for _ in range(2):
        r = client.delete(f"/api/bookings/{booking_id}", headers=headers(student))
        assert r.status_code == 200
        assert r.json()["active"] is False

    assert db.get(Booking, booking_id).active is False

    # место освободилось
    r = client.post("/api/bookings", json=_booking_payload(student, groupsCount=2), headers=headers(teacher))
    assert r.status_code == 201

    r = client.delete("/api/bookings/9999", headers=headers(teacher))
    assert r.status_code == 404


def test_delete_by_outsider_forbidden(client, make_teacher, make_student, add_booking, headers):
    teacher, outsider, student = make_teacher(), make_teacher(), make_student()
    booking = add_booking(student, teacher)

    r = client.delete(f"/api/bookings/{booking.id}", headers=headers(outsider))
    assert r.status_code == 403


def test_teacher_students_list(client, make_teacher, make_student, add_booking, headers):
    teacher, other = make_teacher(), make_teacher()
    student = make_student(first_name="Oleg", program="Физика")
    add_booking(student, teacher, program="X", groups=2)
    add_booking(student, teacher, program="Y", active=False)
    add_booking(student, other, program="Z")

    r = client.get(f"/api/teachers/{teacher.id}/students", headers=headers(teacher))
    assert r.status_code == 200
    rows = r.json()["students"]
    assert len(rows) == 1
    assert rows[0]["id"] == student.id
    assert rows[0]["program"] == "X"
    assert rows[0]["edu_program"] == "Физика"
    assert rows[0]["groups_count"] == 2

    r = client.get(f"/api/teachers/{other.id}/students", headers=headers(teacher))
    assert r.status_code == 403


def test_student_disciplines(client, make_teacher, make_student, add_booking, headers):
    teacher = make_teacher(first_name="Анна", last_name="Петрова")
    student = make_student()
    add_booking(student, teacher, discipline="machine_learning", program="X")
    add_booking(student, teacher, program="Y", active=False)

    r = client.get(f"/api/students/{student.id}/disciplines", headers=headers(student))
    assert r.status_code == 200
    rows = r.json()["disciplines"]
    assert len(rows) == 1
    assert rows[0]["teacher_last_name"] == "Петрова"
    assert rows[0]["discipline_label"] == "Машинное обучение"

    stranger = make_student()
    r = client.get(f"/api/students/{student.id}/disciplines", headers=headers(stranger))
    assert r.status_code == 403
