from __future__ import annotations

import io

from sqlalchemy import select

from tuition_center.extensions import db
from tuition_center.notifications.model import Notification


def _upload(client, headers, subject, *, filename="notes.pdf", content=b"%PDF-1.4 lesson one", title="Lesson 1"):
    data = {
        "title": title,
        "subject_id": str(subject.subject_id),
        "file": (io.BytesIO(content), filename),
    }
    return client.post("/api/study-materials/upload", data=data, headers=headers, content_type="multipart/form-data")


def test_tutor_uploads_material_and_class_is_notified(app, client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, tutor=tutor)
    kamal = make.student("kamal", school_class, [maths])
    admin = make.admin()

    resp = _upload(client, make.headers(tutor.user), maths)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["uploaded_by"] == tutor.tutor_id
    assert data["file_name"] == "notes.pdf"
    assert data["file_url"].startswith("/storage/study_materials/")

    stored = app.extensions["container"].uploads.absolute(data["file_url"][len("/storage/"):])
    assert stored.read_bytes() == b"%PDF-1.4 lesson one"

    recipients = {n.user_id for n in db.session.scalars(select(Notification)).all()}
    assert recipients == {kamal.user_id, admin.user_id}


def test_unsupported_extension_is_rejected(client, make):
    tutor = make.tutor()
    maths = make.subject(make.school_class(), tutor=tutor)

    resp = _upload(client, make.headers(tutor.user), maths, filename="virus.exe")

    assert resp.status_code == 422
    assert "file" in resp.get_json()["errors"]


def test_missing_file_is_rejected(client, make):
    tutor = make.tutor()
    maths = make.subject(make.school_class(), tutor=tutor)

    resp = client.post(
        "/api/study-materials/upload",
        data={"title": "Lesson", "subject_id": str(maths.subject_id)},
        headers=make.headers(tutor.user),
        content_type="multipart/form-data",
    )

    assert resp.status_code == 422


def test_tutor_cannot_upload_for_foreign_subject(client, make):
    owner = make.tutor("owner")
    other = make.tutor("other", full_name="Other Tutor")
    maths = make.subject(make.school_class(), tutor=owner)

    resp = _upload(client, make.headers(other.user), maths)

    assert resp.status_code == 403


def test_enrolled_student_downloads_and_outsider_cannot(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", tutor=tutor)
    science = make.subject(school_class, "Science", tutor=tutor)
    kamal = make.student("kamal", school_class, [maths])
    nimali = make.student("nimali", school_class, [science], full_name="Nimali Fernando")
    material = _upload(client, make.headers(tutor.user), maths).get_json()["data"]

    ok = client.get(f"/api/study-materials/download/{material['material_id']}", headers=make.headers(kamal.user))
    assert ok.status_code == 200
    assert ok.data == b"%PDF-1.4 lesson one"
    assert "notes.pdf" in ok.headers["Content-Disposition"]

    denied = client.get(f"/api/study-materials/download/{material['material_id']}", headers=make.headers(nimali.user))
    assert denied.status_code == 403


def test_students_list_only_enrolled_subjects(client, make):
    tutor = make.tutor()
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", tutor=tutor)
    science = make.subject(school_class, "Science", tutor=tutor)
    kamal = make.student("kamal", school_class, [maths])
    headers = make.headers(tutor.user)
    _upload(client, headers, maths, title="Algebra")
    _upload(client, headers, science, title="Cells")

    rows = client.get("/api/study-materials", headers=make.headers(kamal.user)).get_json()["data"]

    assert [r["title"] for r in rows] == ["Algebra"]


def test_delete_removes_file(app, client, make):
    tutor = make.tutor()
    maths = make.subject(make.school_class(), tutor=tutor)
    headers = make.headers(tutor.user)
    material = _upload(client, headers, maths).get_json()["data"]
    stored = app.extensions["container"].uploads.absolute(material["file_url"][len("/storage/"):])

    resp = client.delete(f"/api/study-materials/{material['material_id']}", headers=headers)

    assert resp.status_code == 200
    assert not stored.exists()
