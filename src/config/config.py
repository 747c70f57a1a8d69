import os
import urllib.parse


def env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "tuition-center-secret"
    CENTER_NAME = os.environ.get("CENTER_NAME", "Tuition Center")

    # Database
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", os.environ.get("DB_DATABASE", "tuition_center"))

    _encoded_password = urllib.parse.quote_plus(DB_PASSWORD)
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL") or (
        f"mysql+mysqlconnector://{DB_USER}:{_encoded_password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Auth
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY") or SECRET_KEY
    JWT_EXPIRES_MINUTES = int(os.environ.get("JWT_EXPIRES_MINUTES", "1440"))

    # Fernet key for encrypted profile columns; derived from SECRET_KEY when empty
    FIELD_ENCRYPTION_KEY = os.environ.get("FIELD_ENCRYPTION_KEY", "")

    # SMS
    SMS_PROVIDER = os.environ.get("SMS_PROVIDER", "log")
    SMS_API_KEY = os.environ.get("SMS_API_KEY", "")
    SMS_TIMEOUT = float(os.environ.get("SMS_TIMEOUT", "10"))
    NOTIFY_LK_USER_ID = os.environ.get("NOTIFY_LK_USER_ID", "")
    NOTIFY_LK_SENDER_ID = os.environ.get("NOTIFY_LK_SENDER_ID", "NotifyDEMO")
    TWILIO_ACCOUNT_SID = os.environ.get("TWILIO_ACCOUNT_SID", "")
    TWILIO_AUTH_TOKEN = os.environ.get("TWILIO_AUTH_TOKEN", "")
    TWILIO_PHONE_NUMBER = os.environ.get("TWILIO_PHONE_NUMBER", "")
    NEXMO_API_KEY = os.environ.get("NEXMO_API_KEY", "")
    NEXMO_API_SECRET = os.environ.get("NEXMO_API_SECRET", "")
    NEXMO_FROM = os.environ.get("NEXMO_FROM", "TuitionCenter")

    # Uploads
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", os.path.join(os.getcwd(), "storage"))
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(12 * 1024 * 1024)))

    CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

    DEFAULT_ADMIN_USERNAME = os.environ.get("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD = os.environ.get("DEFAULT_ADMIN_PASSWORD", "admin123")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Dev helpers
    AUTO_INIT_DB = env_flag("AUTO_INIT_DB")
    AUTO_SEED_DB = env_flag("AUTO_SEED_DB")


SECRET_KEY = Config.SECRET_KEY
CENTER_NAME = Config.CENTER_NAME
DB_HOST = Config.DB_HOST
DB_PORT = Config.DB_PORT
DB_NAME = Config.DB_NAME
SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI
SQLALCHEMY_TRACK_MODIFICATIONS = Config.SQLALCHEMY_TRACK_MODIFICATIONS
JWT_SECRET_KEY = Config.JWT_SECRET_KEY
JWT_EXPIRES_MINUTES = Config.JWT_EXPIRES_MINUTES
FIELD_ENCRYPTION_KEY = Config.FIELD_ENCRYPTION_KEY
SMS_PROVIDER = Config.SMS_PROVIDER
SMS_API_KEY = Config.SMS_API_KEY
SMS_TIMEOUT = Config.SMS_TIMEOUT
NOTIFY_LK_USER_ID = Config.NOTIFY_LK_USER_ID
NOTIFY_LK_SENDER_ID = Config.NOTIFY_LK_SENDER_ID
TWILIO_ACCOUNT_SID = Config.TWILIO_ACCOUNT_SID
TWILIO_AUTH_TOKEN = Config.TWILIO_AUTH_TOKEN
TWILIO_PHONE_NUMBER = Config.TWILIO_PHONE_NUMBER
NEXMO_API_KEY = Config.NEXMO_API_KEY
NEXMO_API_SECRET = Config.NEXMO_API_SECRET
NEXMO_FROM = Config.NEXMO_FROM
UPLOAD_FOLDER = Config.UPLOAD_FOLDER
MAX_CONTENT_LENGTH = Config.MAX_CONTENT_LENGTH
CORS_ORIGINS = Config.CORS_ORIGINS
DEFAULT_ADMIN_USERNAME = Config.DEFAULT_ADMIN_USERNAME
DEFAULT_ADMIN_PASSWORD = Config.DEFAULT_ADMIN_PASSWORD
LOG_LEVEL = Config.LOG_LEVEL
AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
