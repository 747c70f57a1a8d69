API_PREFIX = "/api"

PASSWORD_MIN_LENGTH = 6

STUDENTS_PER_PAGE = 20
TUTORS_PER_PAGE = 20
STUDENT_FEES_PER_PAGE = 15
TUTOR_SALARIES_PER_PAGE = 15
NOTIFICATIONS_PER_PAGE = 20
HISTORY_PER_PAGE = 20

# Consecutive absences that trigger a guardian alert
ABSENCE_ALERT_STREAK = 3

MATERIAL_ALLOWED_EXTENSIONS = {"pdf", "doc", "docx"}
MATERIAL_MAX_BYTES = 10 * 1024 * 1024
PHOTO_ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
PHOTO_MAX_BYTES = 2 * 1024 * 1024

PROFILE_PHOTO_DIR = "profiles"
MATERIAL_DIR = "study_materials"
STORAGE_URL_PREFIX = "/storage"
CURRENCY = "Rs."
