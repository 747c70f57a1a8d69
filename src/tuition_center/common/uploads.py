from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import PHOTO_ALLOWED_EXTENSIONS, PHOTO_MAX_BYTES, PROFILE_PHOTO_DIR, STORAGE_URL_PREFIX
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def size_label(num_bytes: int) -> str:
    return f"{round(num_bytes / 1024, 2)} KB"


def public_url(relative_path: Optional[str]) -> Optional[str]:
    if not relative_path:
        return None
    return f"{STORAGE_URL_PREFIX}/{relative_path}"


class UploadStore:
    """Stores uploaded files below one root folder.

    Paths handed back to callers are relative to the root (``profiles/x.png``)
    so rows stay valid if the folder moves.
    """

    def __init__(self, root: str):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def validate(
        self,
        file: FileStorage,
        *,
        field: str,
        allowed: Iterable[str],
        max_bytes: int,
    ) -> int:
        """Return the file size in bytes or raise a field error."""
        if not file or not file.filename:
            raise ValidationError.for_field(field, f"The {field} field is required.")

        allowed = set(allowed)
        if file_extension(file.filename) not in allowed:
            raise ValidationError.for_field(
                field, f"The {field} must be a file of type: {', '.join(sorted(allowed))}."
            )

        stream = file.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        if size > max_bytes:
            raise ValidationError.for_field(
                field, f"The {field} may not be greater than {max_bytes // 1024} kilobytes."
            )
        return size

    def save(self, file: FileStorage, *, folder: str) -> str:
        original = secure_filename(file.filename or "") or "upload"
        name = f"{uuid.uuid4().hex[:12]}_{original}"
        target_dir = self._root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        file.save(str(target_dir / name))
        return f"{folder}/{name}"

    def absolute(self, relative_path: str) -> Path:
        return self._root / relative_path

    def exists(self, relative_path: Optional[str]) -> bool:
        return bool(relative_path) and self.absolute(relative_path).is_file()

    def delete(self, relative_path: Optional[str]) -> None:
        if not relative_path:
            return
        try:
            self.absolute(relative_path).unlink()
        except FileNotFoundError:
            logger.info("Stored file already gone: %s", relative_path)
        except OSError:
            logger.exception("Could not delete stored file %s", relative_path)

    def save_photo(self, file: FileStorage) -> str:
        self.validate(file, field="profile_photo", allowed=PHOTO_ALLOWED_EXTENSIONS, max_bytes=PHOTO_MAX_BYTES)
        return self.save(file, folder=PROFILE_PHOTO_DIR)
