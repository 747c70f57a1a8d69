from __future__ import annotations

from datetime import time


def _payload(subject, **overrides):
    body = {
        "class_id": subject.class_id,
        "subject_id": subject.subject_id,
        "schedule_date": "2025-03-10",
        "start_time": "09:00",
        "end_time": "10:00",
    }
    body.update(overrides)
    return body


def test_overlapping_tutor_schedule_is_409(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", tutor=tutor)
    science = make.subject(school_class, "Science", tutor=tutor)
    headers = make.headers(make.admin())

    created = client.post("/api/schedules", json=_payload(maths), headers=headers)
    assert created.status_code == 201
    assert created.get_json()["data"]["status"] == "Upcoming"
    assert created.get_json()["data"]["tutor_id"] == tutor.tutor_id

    clash = client.post(
        "/api/schedules", json=_payload(science, start_time="09:30", end_time="10:30"), headers=headers
    )
    assert clash.status_code == 409
    assert clash.get_json()["success"] is False


def test_back_to_back_schedules_do_not_conflict(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=tutor)
    headers = make.headers(make.admin())

    client.post("/api/schedules", json=_payload(maths), headers=headers)
    resp = client.post("/api/schedules", json=_payload(maths, start_time="10:00", end_time="11:00"), headers=headers)

    assert resp.status_code == 201


def test_end_time_must_follow_start_time(client, make):
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=make.tutor())
    headers = make.headers(make.admin())

    resp = client.post("/api/schedules", json=_payload(maths, start_time="11:00", end_time="10:00"), headers=headers)

    assert resp.status_code == 422
    assert "end_time" in resp.get_json()["errors"]


def test_tutor_cannot_schedule_another_tutor(client, make):
    me = make.tutor("me")
    other = make.tutor("other", full_name="Other Tutor")
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=me)

    resp = client.post(
        "/api/schedules", json=_payload(maths, tutor_id=other.tutor_id), headers=make.headers(me.user)
    )

    assert resp.status_code == 403


def test_update_rechecks_overlap_but_ignores_itself(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=tutor)
    first = make.schedule(maths, start=time(9, 0), end=time(10, 0))
    second = make.schedule(maths, start=time(11, 0), end=time(12, 0))
    headers = make.headers(make.admin())

    stretch = client.put(
        f"/api/schedules/{first.schedule_id}", json={"start_time": "08:30", "end_time": "10:30"}, headers=headers
    )
    assert stretch.status_code == 200

    clash = client.put(
        f"/api/schedules/{second.schedule_id}", json={"start_time": "10:00", "end_time": "11:30"}, headers=headers
    )
    assert clash.status_code == 409

    bad_status = client.put(f"/api/schedules/{second.schedule_id}", json={"status": "Done"}, headers=headers)
    assert bad_status.status_code == 422


def test_students_only_see_their_class(client, make):
    tutor = make.tutor()
    grade_10 = make.school_class("Grade 10")
    grade_11 = make.school_class("Grade 11")
    make.schedule(make.subject(grade_10, tutor=tutor))
    make.schedule(make.subject(grade_11, tutor=tutor), start=time(14, 0), end=time(15, 0))
    student = make.student("kamal", grade_10)

    rows = client.get("/api/schedules", headers=make.headers(student.user)).get_json()["data"]

    assert [r["class_id"] for r in rows] == [grade_10.class_id]
