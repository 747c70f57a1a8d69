from __future__ import annotations

from contextlib import nullcontext
from types import SimpleNamespace

from tuition_center.attendance.service import AttendanceService, percentage, summarize
from tuition_center.notifications.sms import SmsResult


def rec(schedule_id, status):
    return SimpleNamespace(schedule_id=schedule_id, status=status)


def test_late_counts_as_present():
    summary = summarize([rec(1, "Present"), rec(2, "Late"), rec(3, "Absent")])

    assert summary == {"total_scheduled": 3, "present_count": 2, "absent_count": 1, "late_count": 1}


def test_one_record_per_schedule():
    summary = summarize([rec(1, "Present"), rec(1, "Absent")])

    assert summary["total_scheduled"] == 1
    assert summary["present_count"] == 1


def test_percentage_rounds_and_handles_zero():
    assert percentage(2, 3) == 66.67
    assert percentage(0, 0) == 0.0


class FakeAttendance:
    def __init__(self, statuses):
        self._statuses = statuses

    def recent_statuses(self, student_id, *, limit):
        return self._statuses[:limit]


class FakeSms:
    def __init__(self, ok=True):
        self.sent = []
        self._ok = ok

    def send(self, phone, message):
        self.sent.append((phone, message))
        return SmsResult(self._ok, "ok" if self._ok else "rejected", "fake")


def service_with(statuses, sms):
    return AttendanceService(
        FakeAttendance(statuses), None, None, sms=sms, transaction=nullcontext, center_name="Bright Minds", alert_streak=3
    )


STUDENT = SimpleNamespace(student_id=1, full_name="Kamal Silva", guardian_contact="0719876543")


def test_streak_of_absences_alerts_guardian():
    sms = FakeSms()

    assert service_with(["Absent", "Absent", "Absent"], sms)._alert_if_absent_streak(STUDENT) is True
    phone, text = sms.sent[0]
    assert phone == "0719876543"
    assert "Kamal Silva" in text
    assert "Bright Minds" in text


def test_broken_or_short_streak_stays_silent():
    sms = FakeSms()

    assert service_with(["Absent", "Late", "Absent"], sms)._alert_if_absent_streak(STUDENT) is False
    assert service_with(["Absent", "Absent"], sms)._alert_if_absent_streak(STUDENT) is False
    assert sms.sent == []


def test_failed_alert_is_reported_not_raised():
    sms = FakeSms(ok=False)

    assert service_with(["Absent"] * 3, sms)._alert_if_absent_streak(STUDENT) is False
    assert len(sms.sent) == 1
