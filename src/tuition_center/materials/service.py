from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple

from werkzeug.datastructures import FileStorage

from ..classes.repository import ClassRepository, SubjectRepository
from ..common.access import actor_student, actor_tutor_id, has_role, is_admin
from ..common.datetime_utils import now_local
from ..common.uploads import UploadStore, file_extension, size_label
from ..common.validators import FormValidator
from ..core.constants import MATERIAL_ALLOWED_EXTENSIONS, MATERIAL_DIR, MATERIAL_MAX_BYTES
from ..core.enums import NotificationStatus, NotificationType, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..notifications.repository import NotificationRepository
from ..students.repository import StudentRepository
from ..tutors.repository import TutorRepository
from ..users.repository import UserRepository
from .repository import MaterialRepository

logger = logging.getLogger(__name__)

Transaction = Callable[[], AbstractContextManager]


class MaterialService:
    def __init__(
        self,
        materials: MaterialRepository,
        classes: ClassRepository,
        subjects: SubjectRepository,
        tutors: TutorRepository,
        students: StudentRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        *,
        uploads: UploadStore,
        transaction: Transaction,
    ):
        self._materials = materials
        self._classes = classes
        self._subjects = subjects
        self._tutors = tutors
        self._students = students
        self._users = users
        self._notifications = notifications
        self._uploads = uploads
        self._transaction = transaction

    def get(self, material_id: int):
        material = self._materials.get(material_id)
        if material is None:
            raise NotFoundError("Study material not found")
        return material

    def list_for(
        self,
        *,
        actor,
        class_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        tutor_id: Optional[int] = None,
        search: Optional[str] = None,
    ):
        """Students see their subjects; tutors their subjects plus their own uploads."""
        subject_ids = None
        uploaded_by = None
        if has_role(actor, Role.STUDENT):
            student = actor_student(actor)
            if student is None:
                return []
            subject_ids = [s.subject_id for s in student.subjects]
        elif has_role(actor, Role.TUTOR):
            uploaded_by = actor_tutor_id(actor)
            if uploaded_by is None:
                return []
            subject_ids = [s.subject_id for s in self._subjects.list_filtered(tutor_id=uploaded_by)]

        return self._materials.list_filtered(
            class_id=class_id,
            subject_id=subject_id,
            tutor_id=tutor_id,
            search=search,
            subject_ids=subject_ids,
            or_uploaded_by=uploaded_by,
        )

    def options(self, *, actor) -> dict:
        if is_admin(actor):
            classes = self._classes.list_all()
            subjects = self._subjects.list_filtered()
            tutors = self._tutors.list_active()
        elif has_role(actor, Role.TUTOR):
            tutor_id = actor_tutor_id(actor)
            subjects = self._subjects.list_filtered(tutor_id=tutor_id) if tutor_id else []
            class_ids = {s.class_id for s in subjects}
            classes = [c for c in self._classes.list_all() if c.class_id in class_ids]
            tutors = []
        else:
            student = actor_student(actor)
            subjects = list(student.subjects) if student else []
            classes = [student.school_class] if student and student.school_class else []
            tutors = []

        return {
            "classes": [{"class_id": c.class_id, "class_name": c.class_name} for c in classes],
            "subjects": [
                {
                    "subject_id": s.subject_id,
                    "subject_name": s.subject_name,
                    "class_id": s.class_id,
                    "class_name": s.school_class.class_name if s.school_class else None,
                    "tutor_id": s.tutor_id,
                }
                for s in subjects
            ],
            "tutors": [{"tutor_id": t.tutor_id, "full_name": t.full_name} for t in tutors],
        }

    def upload(self, data: Mapping[str, Any], file: Optional[FileStorage], *, actor):
        v = FormValidator(data)
        title = v.string("title")
        description = v.string("description", required=False, max_length=None)
        subject_id = v.integer("subject_id")
        subject = None
        if subject_id is not None:
            subject = self._subjects.get(subject_id)
            if subject is None:
                v.fail("subject_id", "The selected subject_id is invalid.")
        v.validate()

        if has_role(actor, Role.TUTOR):
            uploaded_by = actor_tutor_id(actor)
            if uploaded_by is None or subject.tutor_id != uploaded_by:
                raise AuthorizationError("You can only upload materials for subjects assigned to you")
        else:
            uploaded_by = subject.tutor_id

        size = self._uploads.validate(
            file, field="file", allowed=MATERIAL_ALLOWED_EXTENSIONS, max_bytes=MATERIAL_MAX_BYTES
        )
        path = self._uploads.save(file, folder=MATERIAL_DIR)

        try:
            with self._transaction():
                material = self._materials.add(
                    subject_id=subject.subject_id,
                    title=title,
                    description=description,
                    file_path=path,
                    file_name=file.filename,
                    file_size=size_label(size),
                    uploaded_by=uploaded_by,
                )
                self._notify_upload(material, subject, actor)
        except Exception:
            self._uploads.delete(path)
            raise

        logger.info("Study material %s uploaded for subject %s", material.material_id, subject.subject_id)
        return material

    def _notify_upload(self, material, subject, actor) -> None:
        """In-app notices for the class's students and every admin."""
        uploader = material.uploader.full_name if material.uploader else actor.display_name
        class_name = subject.school_class.class_name if subject.school_class else ""
        sent_at = now_local()

        for student in self._students.search(class_id=subject.class_id):
            self._notifications.add(
                title="New Study Material Available",
                type=NotificationType.STUDY_MATERIAL.value,
                message=f"{uploader} uploaded new course material for {subject.subject_name} - {class_name}",
                user_id=student.user_id,
                student_id=student.student_id,
                recipient_phone=student.contact_no,
                status=NotificationStatus.SENT.value,
                sent_date=sent_at,
            )

        for admin in self._users.list_by_role(Role.ADMIN.value):
            if admin.user_id == actor.user_id:
                continue
            self._notifications.add(
                title="New Study Material Uploaded",
                type=NotificationType.STUDY_MATERIAL.value,
                message=f"{uploader} uploaded new material: {material.title}",
                user_id=admin.user_id,
                status=NotificationStatus.SENT.value,
                sent_date=sent_at,
            )

    def download(self, material_id: int, *, actor) -> Tuple[Path, str]:
        material = self.get(material_id)
        if has_role(actor, Role.STUDENT):
            student = actor_student(actor)
            if student is None or material.subject_id not in {s.subject_id for s in student.subjects}:
                raise AuthorizationError("Unauthorized access")
        if not self._uploads.exists(material.file_path):
            raise NotFoundError("File not found")

        name = material.file_name or f"{material.title}.{file_extension(material.file_path)}"
        return self._uploads.absolute(material.file_path), name

    def delete(self, material_id: int, *, actor) -> None:
        material = self.get(material_id)
        if not is_admin(actor):
            tutor_id = actor_tutor_id(actor)
            if tutor_id is None or material.uploaded_by != tutor_id:
                raise AuthorizationError("Unauthorized to delete this material")

        path = material.file_path
        with self._transaction():
            self._materials.delete(material)
        self._uploads.delete(path)
        logger.info("Study material %s deleted", material_id)
