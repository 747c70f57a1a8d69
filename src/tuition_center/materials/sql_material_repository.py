from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import or_, select

from ..classes.model import Subject
from ..database.sql_base import SqlRepository
from .model import StudyMaterial


class SqlMaterialRepository(SqlRepository[StudyMaterial]):
    model = StudyMaterial

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
        stmt = select(StudyMaterial).order_by(StudyMaterial.uploaded_date.desc(), StudyMaterial.material_id.desc())

        if subject_ids is not None:
            in_subjects = StudyMaterial.subject_id.in_([int(i) for i in subject_ids])
            if or_uploaded_by is not None:
                stmt = stmt.where(or_(in_subjects, StudyMaterial.uploaded_by == int(or_uploaded_by)))
            else:
                stmt = stmt.where(in_subjects)

        if class_id is not None:
            class_subjects = select(Subject.subject_id).where(Subject.class_id == int(class_id))
            stmt = stmt.where(StudyMaterial.subject_id.in_(class_subjects))
        if subject_id is not None:
            stmt = stmt.where(StudyMaterial.subject_id == int(subject_id))
        if tutor_id is not None:
            stmt = stmt.where(StudyMaterial.uploaded_by == int(tutor_id))
        if search:
            stmt = stmt.where(StudyMaterial.title.ilike(f"%{search}%"))
        return self.scalars(stmt)
