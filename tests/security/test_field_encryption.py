from __future__ import annotations

from cryptography.fernet import Fernet
from flask import Flask
from sqlalchemy import text

from tuition_center.extensions import db
from tuition_center.security.crypto import FieldCipher, configure_cipher, derive_key, get_cipher


def test_cipher_round_trips_and_hides_plaintext():
    cipher = FieldCipher(Fernet.generate_key())

    token = cipher.encrypt("0719876543")

    assert token != "0719876543"
    assert "0719876543" not in token
    assert cipher.decrypt(token) == "0719876543"


def test_legacy_plaintext_is_returned_as_stored():
    cipher = FieldCipher(derive_key("any secret"))

    assert cipher.decrypt("12 Temple Road") == "12 Temple Road"


def test_derived_key_is_stable():
    assert derive_key("abc") == derive_key("abc")
    assert derive_key("abc") != derive_key("abd")


def test_student_pii_is_encrypted_at_rest(app, make):
    school_class = make.school_class()
    student = make.student("kamal", school_class, guardian_contact="0719876543", address="12 Temple Road, Kandy")

    raw = db.session.execute(
        text("SELECT guardian_contact, address, full_name FROM students WHERE student_id = :id"),
        {"id": student.student_id},
    ).one()

    assert raw.guardian_contact != "0719876543"
    assert raw.address != "12 Temple Road, Kandy"
    assert raw.full_name == "Kamal Silva"

    db.session.expire_all()
    assert student.guardian_contact == "0719876543"
    assert student.address == "12 Temple Road, Kandy"


def _keyed_app(key: str) -> Flask:
    app = Flask(__name__)
    app.config.update(SECRET_KEY="unused", FIELD_ENCRYPTION_KEY=key)
    configure_cipher(app)
    return app


def test_each_app_keeps_its_own_key():
    first = _keyed_app(Fernet.generate_key().decode())
    second = _keyed_app(Fernet.generate_key().decode())

    with first.app_context():
        token = get_cipher().encrypt("0719876543")
    with second.app_context():
        get_cipher().encrypt("0700000000")
        assert get_cipher().decrypt(token) == token
    with first.app_context():
        assert get_cipher().decrypt(token) == "0719876543"


def test_key_falls_back_to_secret_key():
    app = Flask(__name__)
    app.config.update(SECRET_KEY="s3cret", FIELD_ENCRYPTION_KEY="")
    configure_cipher(app)

    with app.app_context():
        token = get_cipher().encrypt("x")

    assert FieldCipher(derive_key("s3cret")).decrypt(token) == "x"
