import os

from .config import *  # noqa: F401,F403
from .config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, tables are created from the ORM metadata on startup
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also create the default admin account
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "1")
