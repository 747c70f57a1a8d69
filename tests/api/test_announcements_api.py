from __future__ import annotations

from sqlalchemy import select

from tuition_center.extensions import db
from tuition_center.notifications.model import Announcement, Notification


def _notified_users():
    return {n.user_id for n in db.session.scalars(select(Notification)).all()}


def test_class_announcement_reaches_only_that_class(client, make, sms):
    tutor = make.tutor(contact_no="0771234567")
    grade_10 = make.school_class("Grade 10")
    grade_11 = make.school_class("Grade 11")
    maths = make.subject(grade_10, tutor=tutor)
    kamal = make.student("kamal", grade_10, [maths], contact_no="0711111111", guardian_contact="0719876543")
    make.student("outsider", grade_11, [], contact_no="0722222222", guardian_contact="0723333333")
    headers = make.headers(make.admin())

    resp = client.post(
        "/api/announcements",
        json={
            "title": "Exam",
            "message": "Term test on Friday",
            "audience": "all",
            "scope": "class",
            "class_id": grade_10.class_id,
        },
        headers=headers,
    )

    assert resp.status_code == 201
    assert _notified_users() == {kamal.user_id, tutor.user_id}
    assert sorted(sms.numbers()) == ["0711111111", "0719876543", "0771234567"]
    assert sms.bulk_calls == 1


def test_failed_sms_is_recorded_on_notification(client, make, sms):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)
    sms.fail = True

    resp = client.post(
        "/api/announcements",
        json={"title": "Closed", "message": "No classes tomorrow", "audience": "students"},
        headers=make.headers(make.admin()),
    )

    assert resp.status_code == 201
    rows = db.session.scalars(select(Notification)).all()
    assert [(n.user_id, n.status) for n in rows] == [(kamal.user_id, "Failed")]


def test_tutor_may_only_address_students(client, make):
    tutor = make.tutor()
    headers = make.headers(tutor.user)

    denied = client.post(
        "/api/announcements", json={"title": "Hi", "message": "Hello all", "audience": "all"}, headers=headers
    )
    allowed = client.post(
        "/api/announcements", json={"title": "Hi", "message": "Hello class", "audience": "students"}, headers=headers
    )

    assert denied.status_code == 403
    assert allowed.status_code == 201


def test_students_do_not_see_tutor_only_announcements(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)
    headers = make.headers(make.admin())
    client.post("/api/announcements", json={"title": "Staff", "message": "Meeting", "audience": "tutors"}, headers=headers)
    client.post("/api/announcements", json={"title": "All", "message": "Holiday", "audience": "all"}, headers=headers)

    student_headers = make.headers(kamal.user)
    titles = [a["title"] for a in client.get("/api/announcements", headers=student_headers).get_json()["data"]]
    assert titles == ["All"]

    staff = client.get("/api/announcements", headers=headers).get_json()["data"]
    staff_id = next(a["announcement_id"] for a in staff if a["title"] == "Staff")
    assert client.get(f"/api/announcements/{staff_id}", headers=student_headers).status_code == 403


def test_read_and_unread_count(client, make):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class)
    client.post(
        "/api/announcements",
        json={"title": "Notice", "message": "Bring your books", "audience": "students"},
        headers=make.headers(make.admin()),
    )
    headers = make.headers(kamal.user)

    assert client.get("/api/notifications/unread-count", headers=headers).get_json()["data"]["count"] == 1

    mine = client.get("/api/notifications/my", headers=headers).get_json()["data"]["items"]
    client.post(f"/api/notifications/{mine[0]['notification_id']}/read", headers=headers)

    assert client.get("/api/notifications/unread-count", headers=headers).get_json()["data"]["count"] == 0


def test_notification_write_failure_keeps_announcement_and_other_rows(app, client, make, monkeypatch):
    school_class = make.school_class()
    kamal = make.student("kamal", school_class, contact_no="0711111111", guardian_contact="0719876543")
    nimal = make.student("nimal", school_class, contact_no="0722222222", guardian_contact="0729876543")
    repo = app.extensions["container"].notifications_repo
    real_add = repo.add

    def add(**fields):
        if fields.get("user_id") == kamal.user_id:
            raise RuntimeError("disk full")
        return real_add(**fields)

    monkeypatch.setattr(repo, "add", add)

    resp = client.post(
        "/api/announcements",
        json={"title": "Closed", "message": "No classes tomorrow", "audience": "students"},
        headers=make.headers(make.admin()),
    )

    assert resp.status_code == 201
    assert len(db.session.scalars(select(Announcement)).all()) == 1
    assert _notified_users() == {nimal.user_id}


def test_broadcast_failure_does_not_fail_the_request(app, client, make, monkeypatch):
    make.student("kamal", make.school_class())
    service = app.extensions["container"].announcement_service

    def explode(announcement):
        raise RuntimeError("recipient lookup failed")

    monkeypatch.setattr(service, "recipients", explode)

    resp = client.post(
        "/api/announcements",
        json={"title": "Notice", "message": "Bring your books", "audience": "students"},
        headers=make.headers(make.admin()),
    )

    assert resp.status_code == 201
    assert len(db.session.scalars(select(Announcement)).all()) == 1
    assert _notified_users() == set()
