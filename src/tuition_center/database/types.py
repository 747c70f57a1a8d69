from __future__ import annotations

from sqlalchemy.types import Text, TypeDecorator

from ..security.crypto import get_cipher


class EncryptedText(TypeDecorator):
    """Text column stored as a Fernet token and read back as plaintext."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None or value == "":
            return value
        return get_cipher().encrypt(str(value))

    def process_result_value(self, value, dialect):
        if value is None or value == "":
            return value
        return get_cipher().decrypt(value)
