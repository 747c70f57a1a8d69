from __future__ import annotations

import base64
import hashlib
import logging
from typing import Union

from cryptography.fernet import Fernet, InvalidToken
from flask import Flask, current_app

logger = logging.getLogger(__name__)


def derive_key(secret: str) -> bytes:
    """Build a Fernet key from an arbitrary secret string."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


class FieldCipher:
    """Symmetric encryption for single column values."""

    def __init__(self, key: Union[str, bytes]):
        self._fernet = Fernet(key)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        """Decrypt ``token``; rows written before encryption was enabled come back unchanged."""
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeEncodeError, ValueError):
            logger.debug("Column value is not a Fernet token, returning it as stored")
            return token


EXTENSION_KEY = "field_cipher"


def configure_cipher(app: Flask) -> FieldCipher:
    """Attach the column cipher to ``app``; each app keeps its own key."""
    cipher = FieldCipher(app.config.get("FIELD_ENCRYPTION_KEY") or derive_key(app.config["SECRET_KEY"]))
    app.extensions[EXTENSION_KEY] = cipher
    return cipher


def get_cipher() -> FieldCipher:
    cipher = current_app.extensions.get(EXTENSION_KEY)
    if cipher is None:
        raise RuntimeError("Field encryption is not configured; call configure_cipher(app) first")
    return cipher
