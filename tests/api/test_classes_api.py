from __future__ import annotations

from datetime import date

from sqlalchemy import select

from tuition_center.classes.model import SchoolClass, Subject
from tuition_center.extensions import db
from tuition_center.students.model import Student


def test_enroll_adds_subjects_and_reprices(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    science = make.subject(school_class, "Science", fee="1000.00")
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(make.admin())

    resp = client.post(
        f"/api/students/{kamal.student_id}/enroll",
        json={"subject_ids": [maths.subject_id, science.subject_id]},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["total_monthly_fee"] == 2500.0
    assert sorted(s["subject_name"] for s in data["subjects"]) == ["Mathematics", "Science"]


def test_enroll_with_unknown_subject_is_rejected(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)

    resp = client.post(
        f"/api/students/{kamal.student_id}/enroll", json={"subject_ids": [999]}, headers=make.headers(make.admin())
    )

    assert resp.status_code == 422


def test_subject_fee_change_reprices_enrolled_students(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(make.admin())

    resp = client.put(f"/api/subjects/{maths.subject_id}", json={"monthly_fee": 1800}, headers=headers)

    assert resp.status_code == 200
    db.session.expire_all()
    assert float(db.session.get(Student, kamal.student_id).total_monthly_fee) == 1800.0


def test_deleting_subject_unenrolls_and_reprices(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    science = make.subject(school_class, "Science", fee="1000.00")
    kamal = make.student("kamal", school_class, [maths, science])
    headers = make.headers(make.admin())

    resp = client.delete(f"/api/subjects/{science.subject_id}", headers=headers)

    assert resp.status_code == 200
    db.session.expire_all()
    student = db.session.get(Student, kamal.student_id)
    assert [s.subject_name for s in student.subjects] == ["Mathematics"]
    assert float(student.total_monthly_fee) == 1500.0


def test_create_subject_needs_valid_class(client, make):
    headers = make.headers(make.admin())

    resp = client.post("/api/subjects", json={"subject_name": "Art", "monthly_fee": 900, "class_id": 42}, headers=headers)

    assert resp.status_code == 422
    assert "class_id" in resp.get_json()["errors"]


def test_student_timetable_lists_enrolled_subjects_only(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", tutor=tutor)
    science = make.subject(school_class, "Science", tutor=tutor)
    kamal = make.student("kamal", school_class, [maths])
    make.schedule(maths)
    make.schedule(science, on=date(2025, 3, 11))

    rows = client.get("/api/student/timetable", headers=make.headers(kamal.user)).get_json()["data"]

    assert [r["subject_id"] for r in rows] == [maths.subject_id]


def test_class_update_syncs_nested_subjects(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    science = make.subject(school_class, "Science", fee="1000.00")
    kamal = make.student("kamal", school_class, [maths, science])
    headers = make.headers(make.admin())

    resp = client.put(
        f"/api/classes/{school_class.class_id}",
        json={
            "academic_level": "A/L",
            "subjects": [
                {"subject_id": maths.subject_id, "subject_name": "Pure Maths", "monthly_fee": 2000},
                {"subject_name": "Chemistry", "monthly_fee": 1200},
            ],
        },
        headers=headers,
    )

    assert resp.status_code == 200
    db.session.expire_all()
    rows = db.session.scalars(
        select(Subject).where(Subject.class_id == school_class.class_id).order_by(Subject.subject_id)
    ).all()
    assert [(s.subject_name, float(s.monthly_fee)) for s in rows] == [("Pure Maths", 2000.0), ("Chemistry", 1200.0)]
    assert rows[0].subject_id == maths.subject_id
    assert rows[1].grade == school_class.class_name
    assert db.session.get(SchoolClass, school_class.class_id).academic_level == "A/L"

    student = db.session.get(Student, kamal.student_id)
    assert [s.subject_name for s in student.subjects] == ["Pure Maths"]
    assert float(student.total_monthly_fee) == 2000.0


def test_class_update_without_subjects_key_keeps_subjects(client, make):
    school_class = make.school_class()
    make.subject(school_class, "Mathematics")

    resp = client.put(
        f"/api/classes/{school_class.class_id}", json={"status": "inactive"}, headers=make.headers(make.admin())
    )

    assert resp.status_code == 200
    db.session.expire_all()
    assert [s.subject_name for s in db.session.get(SchoolClass, school_class.class_id).subjects] == ["Mathematics"]


def test_deleting_class_keeps_students_without_class(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    kamal = make.student("kamal", school_class, [maths])

    resp = client.delete(f"/api/classes/{school_class.class_id}", headers=make.headers(make.admin()))

    assert resp.status_code == 200
    db.session.expire_all()
    student = db.session.get(Student, kamal.student_id)
    assert student is not None
    assert student.class_id is None
    assert student.subjects == []
    assert float(student.total_monthly_fee) == 0.0
    assert db.session.get(Subject, maths.subject_id) is None
