from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from ..common.validators import FormValidator
from ..core.enums import ClassStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..tutors.repository import TutorRepository
from .repository import ClassRepository, SubjectRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]


def _read_subject(v: FormValidator, tutors: TutorRepository, *, partial: bool = False) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    if not partial or v.has("subject_name"):
        fields["subject_name"] = v.string("subject_name")
    if not partial or v.has("monthly_fee"):
        fields["monthly_fee"] = v.number("monthly_fee")
    if v.has("grade"):
        fields["grade"] = v.string("grade", required=False, max_length=100)
    if v.has("study_materials"):
        fields["study_materials"] = v.string("study_materials", required=False, max_length=None)
    if v.has("tutor_id"):
        tutor_id = v.integer("tutor_id", required=False)
        if tutor_id is not None and tutors.get(tutor_id) is None:
            v.fail("tutor_id", "The selected tutor_id is invalid.")
        fields["tutor_id"] = tutor_id
    return fields


class ClassService:
    def __init__(
        self,
        classes: ClassRepository,
        subjects: SubjectRepository,
        tutors: TutorRepository,
        *,
        transaction: Transaction,
    ):
        self._classes = classes
        self._subjects = subjects
        self._tutors = tutors
        self._transaction = transaction

    def list_classes(self, *, status: Optional[str] = None) -> Sequence:
        return self._classes.list_all(status=status)

    def get(self, class_id: int):
        school_class = self._classes.get(class_id)
        if school_class is None:
            raise NotFoundError("Class not found")
        return school_class

    def _validate_nested_subjects(self, raw: Any, errors: Dict[str, List[str]]) -> List[Dict[str, Any]]:
        if raw in (None, ""):
            return []
        if not isinstance(raw, list):
            errors.setdefault("subjects", []).append("The subjects must be a list.")
            return []

        cleaned = []
        for index, item in enumerate(raw):
            if not isinstance(item, Mapping):
                errors.setdefault(f"subjects.{index}", []).append("Each subject must be an object.")
                continue
            v = FormValidator(item)
            fields = _read_subject(v, self._tutors)
            subject_id = v.integer("subject_id", required=False) if v.has("subject_id") else None
            for field, messages in v.errors.items():
                errors.setdefault(f"subjects.{index}.{field}", []).extend(messages)
            cleaned.append({"subject_id": subject_id, **fields})
        return cleaned

    def create(self, data: Mapping[str, Any]):
        v = FormValidator(data)
        class_name = v.string("class_name")
        academic_level = v.string("academic_level", required=False, max_length=100)
        status = v.choice("status", [s.value for s in ClassStatus], required=False) or ClassStatus.ACTIVE.value
        if class_name and self._classes.name_taken(class_name):
            v.fail("class_name", "The class_name has already been taken.")
        subjects = self._validate_nested_subjects(data.get("subjects"), v.errors)
        v.validate()

        with self._transaction():
            school_class = self._classes.add(class_name=class_name, academic_level=academic_level, status=status)
            for fields in subjects:
                fields.pop("subject_id", None)
                self._subjects.add(class_id=school_class.class_id, grade=fields.pop("grade", None) or class_name, **fields)

        logger.info("Class %s created with %d subjects", class_name, len(subjects))
        return school_class

    def update(self, class_id: int, data: Mapping[str, Any]):
        school_class = self.get(class_id)

        v = FormValidator(data)
        if v.has("class_name"):
            class_name = v.string("class_name")
            if class_name and self._classes.name_taken(class_name, exclude_id=school_class.class_id):
                v.fail("class_name", "The class_name has already been taken.")
        if v.has("academic_level"):
            v.string("academic_level", required=False, max_length=100)
        if v.has("status"):
            v.choice("status", [s.value for s in ClassStatus])
        sync_subjects = "subjects" in data
        subjects = self._validate_nested_subjects(data.get("subjects"), v.errors) if sync_subjects else []
        v.validate()

        with self._transaction():
            for field in ("class_name", "academic_level", "status"):
                if v.has(field):
                    value = data[field]
                    setattr(school_class, field, value.strip() if isinstance(value, str) else value)

            if sync_subjects:
                self._sync_subjects(school_class, subjects)

        return school_class

    def _sync_subjects(self, school_class, subjects: List[Dict[str, Any]]) -> None:
        """Subjects missing from the payload are deleted, known ids updated, the rest created."""
        existing = {s.subject_id: s for s in school_class.subjects}
        keep_ids = {s["subject_id"] for s in subjects if s.get("subject_id") in existing}

        for subject_id, subject in existing.items():
            if subject_id not in keep_ids:
                detach_subject(subject)
                self._subjects.delete(subject)

        for fields in subjects:
            subject_id = fields.pop("subject_id", None)
            if subject_id in existing:
                subject = existing[subject_id]
                for key, value in fields.items():
                    setattr(subject, key, value)
                for student in subject.students:
                    student.recompute_monthly_fee()
            else:
                grade = fields.pop("grade", None) or school_class.class_name
                self._subjects.add(class_id=school_class.class_id, grade=grade, **fields)

    def delete(self, class_id: int) -> None:
        school_class = self.get(class_id)
        with self._transaction():
            for subject in list(school_class.subjects):
                detach_subject(subject)
            self._classes.delete(school_class)
        logger.info("Class %s deleted", class_id)


class SubjectService:
    def __init__(
        self,
        subjects: SubjectRepository,
        classes: ClassRepository,
        tutors: TutorRepository,
        *,
        transaction: Transaction,
    ):
        self._subjects = subjects
        self._classes = classes
        self._tutors = tutors
        self._transaction = transaction

    def list_subjects(self, *, class_id: Optional[int] = None, tutor_id: Optional[int] = None) -> Sequence:
        return self._subjects.list_filtered(class_id=class_id, tutor_id=tutor_id)

    def get(self, subject_id: int):
        subject = self._subjects.get(subject_id)
        if subject is None:
            raise NotFoundError("Subject not found")
        return subject

    def _check_class(self, v: FormValidator, *, required: bool) -> Optional[Any]:
        class_id = v.integer("class_id", required=required)
        if class_id is None:
            return None
        school_class = self._classes.get(class_id)
        if school_class is None:
            v.fail("class_id", "The selected class_id is invalid.")
        return school_class

    def create(self, data: Mapping[str, Any]):
        v = FormValidator(data)
        school_class = self._check_class(v, required=True)
        fields = _read_subject(v, self._tutors)
        v.validate()

        if not fields.get("grade"):
            fields["grade"] = school_class.class_name
        with self._transaction():
            subject = self._subjects.add(class_id=school_class.class_id, **fields)
        return subject

    def update(self, subject_id: int, data: Mapping[str, Any]):
        subject = self.get(subject_id)

        v = FormValidator(data)
        school_class = self._check_class(v, required=False) if v.has("class_id") else None
        fields = _read_subject(v, self._tutors, partial=True)
        v.validate()

        fee_changed = "monthly_fee" in fields and fields["monthly_fee"] != subject.monthly_fee
        with self._transaction():
            if school_class is not None:
                subject.class_id = school_class.class_id
            for key, value in fields.items():
                setattr(subject, key, value)
            if fee_changed:
                for student in subject.students:
                    student.recompute_monthly_fee()
        return subject

    def delete(self, subject_id: int) -> None:
        subject = self.get(subject_id)
        with self._transaction():
            detach_subject(subject)
            self._subjects.delete(subject)
        logger.info("Subject %s deleted", subject_id)


def require_subjects(subjects: SubjectRepository, subject_ids: Sequence[int], *, field: str = "subject_ids"):
    """Load subjects by id, raising a field error when any id is unknown."""
    found = list(subjects.get_many(subject_ids))
    if len(found) != len(set(subject_ids)):
        raise ValidationError.for_field(field, f"The selected {field} is invalid.")
    return found


def detach_subject(subject) -> None:
    """Unenroll everyone from ``subject`` and re-price their monthly fee."""
    for student in list(subject.students):
        student.subjects.remove(subject)
        student.recompute_monthly_fee()
