from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import StudyMaterial


class MaterialRepository(Protocol):
    def get(self, material_id: int) -> Optional[StudyMaterial]:
        raise NotImplementedError

    def add(self, **fields: Any) -> StudyMaterial:
        raise NotImplementedError

    def delete(self, material: StudyMaterial) -> None:
        raise NotImplementedError

    def list_filtered(
        self,
        *,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        tutor_id: Optional[int] = None,
        search: Optional[str] = None,
        subject_ids: Optional[Sequence[int]] = None,
        or_uploaded_by: Optional[int] = None,
    ) -> Sequence[StudyMaterial]:
        """Newest first.

        ``subject_ids`` limits rows to those subjects; with ``or_uploaded_by``
        rows uploaded by that tutor are kept as well.
        """
        raise NotImplementedError
