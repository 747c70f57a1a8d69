from __future__ import annotations

from datetime import date, time
from decimal import Decimal

import pytest

from tuition_center.common.validators import FormValidator, require_min_length, require_non_empty
from tuition_center.core.exceptions import ValidationError


def test_collects_errors_for_every_field():
    v = FormValidator({"name": "", "age": "x", "fee": "-5", "day": "2025-02-30", "slot": "9am"})

    assert v.string("name") is None
    assert v.integer("age") is None
    v.number("fee")
    assert v.date("day") is None
    assert v.time("slot") is None

    with pytest.raises(ValidationError) as err:
        v.validate()
    assert set(err.value.errors) == {"name", "age", "fee", "day", "slot"}


def test_clean_values():
    v = FormValidator(
        {"name": "  Kamal ", "age": "17", "fee": "1500.5", "day": "2025-03-10", "slot": "09:30", "month": "2025-03"}
    )

    assert v.string("name") == "Kamal"
    assert v.integer("age") == 17
    assert v.number("fee") == Decimal("1500.50")
    assert v.date("day") == date(2025, 3, 10)
    assert v.time("slot") == time(9, 30)
    assert v.month("month") == "2025-03"
    v.validate()


def test_optional_fields_may_be_missing():
    v = FormValidator({})

    assert v.string("remarks", required=False) is None
    assert v.id_list("subject_ids", required=False) is None
    v.validate()


def test_month_and_choice():
    v = FormValidator({"month": "2025-13", "status": "Lost"})

    v.month("month")
    v.choice("status", ["Pending", "Paid"])

    assert set(v.errors) == {"month", "status"}


def test_id_list_accepts_csv_and_dedupes():
    v = FormValidator({"subject_ids": "3,1,3"})

    assert v.id_list("subject_ids") == [3, 1]


def test_max_length_and_email():
    v = FormValidator({"code": "abcdef", "email": "not-an-email"})

    v.string("code", max_length=5)
    v.email("email")

    assert set(v.errors) == {"code", "email"}


def test_boolean_flags():
    v = FormValidator({"a": "true", "b": "0", "c": True})

    assert v.boolean("a") is True
    assert v.boolean("b") is False
    assert v.boolean("c") is True
    assert v.boolean("missing", default=True) is True


def test_plain_helpers():
    assert require_non_empty("  admin ", "username") == "admin"
    with pytest.raises(ValidationError):
        require_non_empty("   ", "username")
    with pytest.raises(ValidationError):
        require_min_length("abc", "password", 6)
