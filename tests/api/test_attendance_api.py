from __future__ import annotations

from datetime import date

from tuition_center.extensions import db
from tuition_center.schedules.model import ClassSchedule


def _class_with_tutor(make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=tutor)
    return tutor, school_class, maths


def _mark(client, headers, schedule, *marks):
    body = {
        "schedule_id": schedule.schedule_id,
        "attendance": [{"student_id": s.student_id, "status": status} for s, status in marks],
    }
    return client.post("/api/attendance/mark", json=body, headers=headers)


def test_marking_completes_the_schedule(client, make):
    tutor, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths])
    schedule = make.schedule(maths)

    resp = _mark(client, make.headers(tutor.user), schedule, (kamal, "Present"))

    assert resp.status_code == 200
    assert resp.get_json()["data"][0]["status"] == "Present"
    db.session.expire_all()
    assert db.session.get(ClassSchedule, schedule.schedule_id).status == "Completed"


def test_remarking_updates_instead_of_duplicating(client, make):
    tutor, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths])
    schedule = make.schedule(maths)
    headers = make.headers(tutor.user)

    _mark(client, headers, schedule, (kamal, "Absent"))
    _mark(client, headers, schedule, (kamal, "Late"))

    roster = client.get(f"/api/attendance/schedule/{schedule.schedule_id}", headers=headers).get_json()["data"]
    assert roster["students"] == [{"student_id": kamal.student_id, "full_name": "Kamal Silva", "status": "Late"}]


def test_invalid_status_is_reported_per_row(client, make):
    tutor, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths])
    schedule = make.schedule(maths)

    resp = _mark(client, make.headers(tutor.user), schedule, (kamal, "Sleeping"))

    assert resp.status_code == 422
    assert "attendance.0.status" in resp.get_json()["errors"]


def test_tutor_cannot_mark_another_tutors_class(client, make):
    _, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths])
    schedule = make.schedule(maths)
    stranger = make.tutor("stranger", full_name="Someone Else")

    resp = _mark(client, make.headers(stranger.user), schedule, (kamal, "Present"))

    assert resp.status_code == 403


def test_summary_counts_only_completed_classes(client, make):
    tutor, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(tutor.user)
    monday = make.schedule(maths, on=date(2025, 3, 10))
    tuesday = make.schedule(maths, on=date(2025, 3, 11))
    wednesday = make.schedule(maths, on=date(2025, 3, 12))

    _mark(client, headers, monday, (kamal, "Present"))
    _mark(client, headers, tuesday, (kamal, "Late"))
    _mark(client, headers, wednesday, (kamal, "Absent"))
    cancelled = client.put(f"/api/schedules/{wednesday.schedule_id}", json={"status": "Cancelled"}, headers=headers)
    assert cancelled.status_code == 200

    own = client.get("/api/attendance/student-summary", headers=make.headers(kamal.user)).get_json()["data"]

    assert own["total_scheduled"] == 2
    assert own["present_count"] == 2
    assert own["late_count"] == 1
    assert own["absent_count"] == 0
    assert own["percentage"] == 100.0

    by_admin = client.get(
        f"/api/attendance/student-summary/{kamal.student_id}", headers=make.headers(make.admin())
    ).get_json()["data"]
    assert by_admin["total_scheduled"] == 2


def test_admin_summary_needs_student_id(client, make):
    resp = client.get("/api/attendance/student-summary", headers=make.headers(make.admin()))

    assert resp.status_code == 400


def test_absence_streak_alerts_guardian_once_threshold_reached(client, make, sms):
    tutor, school_class, maths = _class_with_tutor(make)
    kamal = make.student("kamal", school_class, [maths], guardian_contact="0719876543")
    headers = make.headers(tutor.user)
    days = [date(2025, 3, 10), date(2025, 3, 11), date(2025, 3, 12)]
    schedules = [make.schedule(maths, on=d) for d in days]

    _mark(client, headers, schedules[0], (kamal, "Absent"))
    _mark(client, headers, schedules[1], (kamal, "Absent"))
    assert sms.sent == []

    _mark(client, headers, schedules[2], (kamal, "Absent"))

    assert sms.numbers() == ["0719876543"]
    assert "absent" in sms.sent[0][1]
