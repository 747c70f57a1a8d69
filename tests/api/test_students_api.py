from __future__ import annotations

from werkzeug.security import check_password_hash

from tuition_center.extensions import db
from tuition_center.students.model import Student


def test_empty_subject_list_unenrolls_and_zeroes_fee(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, fee="1500.00")
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(make.admin())

    resp = client.put(f"/api/students/{kamal.student_id}", json={"subject_ids": []}, headers=headers)

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["subjects"] == []
    assert data["total_monthly_fee"] == 0.0


def test_subject_sync_reprices_student(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    science = make.subject(school_class, "Science", fee="1000.00")
    english = make.subject(school_class, "English", fee="800.00")
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(make.admin())

    resp = client.put(
        f"/api/students/{kamal.student_id}",
        json={"subject_ids": [science.subject_id, english.subject_id]},
        headers=headers,
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert sorted(s["subject_name"] for s in data["subjects"]) == ["English", "Science"]
    assert data["total_monthly_fee"] == 1800.0


def test_unknown_subject_is_rejected(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)

    resp = client.put(
        f"/api/students/{kamal.student_id}", json={"subject_ids": [999]}, headers=make.headers(make.admin())
    )

    assert resp.status_code == 422
    assert "subject_ids" in resp.get_json()["errors"]


def test_move_to_another_class_updates_grade(client, make):
    grade_10 = make.school_class("Grade 10")
    grade_11 = make.school_class("Grade 11")
    kamal = make.student("kamal", grade_10)

    resp = client.put(
        f"/api/students/{kamal.student_id}", json={"class_id": grade_11.class_id}, headers=make.headers(make.admin())
    )

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["class_id"] == grade_11.class_id
    assert data["grade"] == "Grade 11"


def test_username_must_stay_unique(client, make):
    school_class = make.school_class()
    make.student("nimal", school_class)
    kamal = make.student("kamal", school_class)

    resp = client.put(
        f"/api/students/{kamal.student_id}", json={"username": "nimal"}, headers=make.headers(make.admin())
    )

    assert resp.status_code == 422
    assert "username" in resp.get_json()["errors"]


def test_password_change_enforces_minimum_length(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)
    headers = make.headers(make.admin())

    short = client.put(f"/api/students/{kamal.student_id}", json={"password": "abc"}, headers=headers)
    ok = client.put(f"/api/students/{kamal.student_id}", json={"password": "newsecret"}, headers=headers)

    assert short.status_code == 422
    assert "password" in short.get_json()["errors"]
    assert ok.status_code == 200
    assert check_password_hash(db.session.get(Student, kamal.student_id).user.password, "newsecret")


def test_only_admin_updates_students(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)

    resp = client.put(
        f"/api/students/{kamal.student_id}", json={"full_name": "Someone Else"}, headers=make.headers(kamal.user)
    )

    assert resp.status_code == 403
