from __future__ import annotations


def _billable(make):
    school_class = make.school_class()
    maths = make.subject(school_class, "Mathematics", fee="1500.00")
    science = make.subject(school_class, "Science", fee="1000.00")
    kamal = make.student("kamal", school_class, [maths, science], guardian_contact="0719876543")
    make.student("nimali", school_class, [maths], full_name="Nimali Fernando", guardian_contact="0725555555")
    make.student("empty", school_class, [], full_name="No Subjects")
    return kamal


def test_generate_monthly_fees_is_idempotent(client, make, sms):
    kamal = _billable(make)
    headers = make.headers(make.admin())

    first = client.post("/api/fees/generate", json={"month": "2025-03"}, headers=headers).get_json()["data"]
    assert first["generated"] == 2
    assert first["skipped"] == 0
    assert sorted(sms.numbers()) == ["0719876543", "0725555555"]

    second = client.post("/api/fees/generate", json={"month": "2025-03"}, headers=headers).get_json()["data"]
    assert second["generated"] == 0
    assert second["skipped"] == 2
    assert len(sms.sent) == 2

    rows = client.get("/api/fees?month=2025-03", headers=headers).get_json()["data"]
    assert len(rows) == 2
    mine = next(r for r in rows if r["student_id"] == kamal.student_id)
    assert mine["amount"] == 2500.0
    assert mine["due_date"] == "2025-03-01"
    assert mine["status"] == "pending"


def test_generate_requires_month_format(client, make):
    headers = make.headers(make.admin())

    resp = client.post("/api/fees/generate", json={"month": "March"}, headers=headers)

    assert resp.status_code == 422
    assert "month" in resp.get_json()["errors"]


def test_manual_fee_for_billed_month_conflicts(client, make):
    kamal = _billable(make)
    headers = make.headers(make.admin())
    body = {"student_id": kamal.student_id, "amount": 2500, "due_date": "2025-04-05"}

    created = client.post("/api/fees", json=body, headers=headers)
    assert created.status_code == 201
    assert created.get_json()["data"]["billing_month"] == "2025-04"

    dup = client.post("/api/fees", json=body, headers=headers)
    assert dup.status_code == 409


def test_pay_and_remind(client, make, sms):
    kamal = _billable(make)
    headers = make.headers(make.admin())
    fee = client.post(
        "/api/fees", json={"student_id": kamal.student_id, "amount": 2500, "due_date": "2025-04-05"}, headers=headers
    ).get_json()["data"]

    remind = client.post(f"/api/fees/{fee['fee_id']}/remind", headers=headers)
    assert remind.status_code == 200
    phone, text = sms.sent[-1]
    assert phone == "0719876543"
    assert "Kamal Silva" in text

    paid = client.post(f"/api/fees/{fee['fee_id']}/pay", headers=headers).get_json()["data"]
    assert paid["status"] == "paid"
    assert paid["paid_date"] is not None

    again = client.post(f"/api/fees/{fee['fee_id']}/remind", headers=headers)
    assert again.status_code == 400


def test_failed_reminder_reports_provider_error(client, make, sms):
    kamal = _billable(make)
    headers = make.headers(make.admin())
    fee = client.post(
        "/api/fees", json={"student_id": kamal.student_id, "amount": 2500, "due_date": "2025-04-05"}, headers=headers
    ).get_json()["data"]
    sms.fail = True

    resp = client.post(f"/api/fees/{fee['fee_id']}/remind", headers=headers)

    assert resp.status_code >= 500
    assert resp.get_json()["success"] is False


def test_student_sees_own_fees_with_summary(client, make):
    kamal = _billable(make)
    admin_headers = make.headers(make.admin())
    client.post("/api/fees/generate", json={"month": "2025-03"}, headers=admin_headers)

    resp = client.get("/api/student/fees", headers=make.headers(kamal.user)).get_json()

    assert [f["student_id"] for f in resp["data"]["items"]] == [kamal.student_id]
    assert resp["summary"]["pending"] == 2500.0
    assert resp["summary"]["paid"] == 0.0
