import os
import tempfile

from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
JWT_SECRET_KEY = "test-jwt-secret"
JWT_EXPIRES_MINUTES = 60
FIELD_ENCRYPTION_KEY = ""

SQLALCHEMY_DATABASE_URI = "sqlite://"

SMS_PROVIDER = "log"

UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "tuition_center_test_storage")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = True
AUTO_SEED_DB = False
