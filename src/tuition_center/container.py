from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.service import AttendanceService
from .attendance.sql_attendance_repository import SqlAttendanceRepository
from .classes.service import ClassService, SubjectService
from .classes.sql_class_repository import SqlClassRepository, SqlSubjectRepository
from .common.uploads import UploadStore
from .database.session import transaction
from .fees.service import FeeService
from .fees.sql_fee_repository import SqlFeeRepository
from .holidays.service import EventService, HolidayService
from .holidays.sql_holiday_repository import SqlEventRepository, SqlHolidayRepository
from .materials.service import MaterialService
from .materials.sql_material_repository import SqlMaterialRepository
from .notifications.service import AnnouncementService, NotificationService
from .notifications.sms import SmsGateway, SmsSender
from .notifications.sql_notification_repository import SqlAnnouncementRepository, SqlNotificationRepository
from .payroll.service import SalaryService
from .payroll.sql_salary_repository import SqlSalaryRepository
from .schedules.service import ScheduleService
from .schedules.sql_schedule_repository import SqlScheduleRepository
from .security.guards import Guards
from .security.tokens import TokenService
from .students.service import StudentService
from .students.sql_student_repository import SqlStudentRepository
from .tutors.service import TutorService
from .tutors.sql_tutor_repository import SqlTutorRepository
from .users.service import AccountService, AuthService
from .users.sql_user_repository import SqlUserRepository


@dataclass(frozen=True)
class Container:
    users_repo: SqlUserRepository
    students_repo: SqlStudentRepository
    tutors_repo: SqlTutorRepository
    classes_repo: SqlClassRepository
    subjects_repo: SqlSubjectRepository
    schedules_repo: SqlScheduleRepository
    attendance_repo: SqlAttendanceRepository
    fees_repo: SqlFeeRepository
    salaries_repo: SqlSalaryRepository
    materials_repo: SqlMaterialRepository
    notifications_repo: SqlNotificationRepository
    announcements_repo: SqlAnnouncementRepository
    holidays_repo: SqlHolidayRepository
    events_repo: SqlEventRepository

    sms: SmsSender
    uploads: UploadStore
    tokens: TokenService
    guards: Guards

    auth_service: AuthService
    account_service: AccountService
    student_service: StudentService
    tutor_service: TutorService
    class_service: ClassService
    subject_service: SubjectService
    schedule_service: ScheduleService
    attendance_service: AttendanceService
    fee_service: FeeService
    salary_service: SalaryService
    material_service: MaterialService
    notification_service: NotificationService
    announcement_service: AnnouncementService
    holiday_service: HolidayService
    event_service: EventService


def build_container(*, config: Mapping[str, object], sms_gateway: Optional[SmsSender] = None) -> Container:
    users_repo = SqlUserRepository()
    students_repo = SqlStudentRepository()
    tutors_repo = SqlTutorRepository()
    classes_repo = SqlClassRepository()
    subjects_repo = SqlSubjectRepository()
    schedules_repo = SqlScheduleRepository()
    attendance_repo = SqlAttendanceRepository()
    fees_repo = SqlFeeRepository()
    salaries_repo = SqlSalaryRepository()
    materials_repo = SqlMaterialRepository()
    notifications_repo = SqlNotificationRepository()
    announcements_repo = SqlAnnouncementRepository()
    holidays_repo = SqlHolidayRepository()
    events_repo = SqlEventRepository()

    sms = sms_gateway or SmsGateway.from_config(config)
    uploads = UploadStore(str(config["UPLOAD_FOLDER"]))
    tokens = TokenService(
        secret=str(config["JWT_SECRET_KEY"]),
        expires_minutes=int(config.get("JWT_EXPIRES_MINUTES") or 1440),
    )
    guards = Guards(tokens, users_repo)
    center_name = str(config.get("CENTER_NAME") or "Tuition Center")

    return Container(
        users_repo=users_repo,
        students_repo=students_repo,
        tutors_repo=tutors_repo,
        classes_repo=classes_repo,
        subjects_repo=subjects_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        fees_repo=fees_repo,
        salaries_repo=salaries_repo,
        materials_repo=materials_repo,
        notifications_repo=notifications_repo,
        announcements_repo=announcements_repo,
        holidays_repo=holidays_repo,
        events_repo=events_repo,
        sms=sms,
        uploads=uploads,
        tokens=tokens,
        guards=guards,
        auth_service=AuthService(users_repo, tokens, transaction=transaction),
        account_service=AccountService(
            users_repo,
            students_repo,
            tutors_repo,
            classes_repo,
            subjects_repo,
            fees_repo,
            schedules_repo,
            uploads=uploads,
            sms=sms,
            transaction=transaction,
            center_name=center_name,
        ),
        student_service=StudentService(
            students_repo,
            users_repo,
            classes_repo,
            subjects_repo,
            schedules_repo,
            uploads=uploads,
            transaction=transaction,
        ),
        tutor_service=TutorService(tutors_repo, users_repo, schedules_repo, uploads=uploads, transaction=transaction),
        class_service=ClassService(classes_repo, subjects_repo, tutors_repo, transaction=transaction),
        subject_service=SubjectService(subjects_repo, classes_repo, tutors_repo, transaction=transaction),
        schedule_service=ScheduleService(
            schedules_repo, classes_repo, subjects_repo, tutors_repo, transaction=transaction
        ),
        attendance_service=AttendanceService(
            attendance_repo,
            schedules_repo,
            students_repo,
            sms=sms,
            transaction=transaction,
            center_name=center_name,
        ),
        fee_service=FeeService(
            fees_repo, students_repo, subjects_repo, sms=sms, transaction=transaction, center_name=center_name
        ),
        salary_service=SalaryService(salaries_repo, tutors_repo, transaction=transaction),
        material_service=MaterialService(
            materials_repo,
            classes_repo,
            subjects_repo,
            tutors_repo,
            students_repo,
            users_repo,
            notifications_repo,
            uploads=uploads,
            transaction=transaction,
        ),
        notification_service=NotificationService(
            notifications_repo, students_repo, sms=sms, transaction=transaction
        ),
        announcement_service=AnnouncementService(
            announcements_repo,
            notifications_repo,
            students_repo,
            tutors_repo,
            classes_repo,
            subjects_repo,
            sms=sms,
            transaction=transaction,
        ),
        holiday_service=HolidayService(holidays_repo, transaction=transaction),
        event_service=EventService(events_repo, transaction=transaction),
    )
