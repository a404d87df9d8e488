# bookstore/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATA_DIR = os.getenv("DATA_DIR", "./database")
PERSISTENCE_BACKEND = os.getenv("PERSISTENCE_BACKEND", "json")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR}/bookstore.db")

JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_TTL_SECONDS = int(os.getenv("TOKEN_TTL_SECONDS", 24 * 60 * 60))

REPORTS_ENABLED = _flag("REPORTS_ENABLED", "true")
REPORT_INTERVAL_SECONDS = int(os.getenv("REPORT_INTERVAL_SECONDS", 24 * 60 * 60))
REPORT_WINDOW_SECONDS = int(os.getenv("REPORT_WINDOW_SECONDS", 24 * 60 * 60))

REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", REDIS_URL)
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

DEBUG = _flag("DEBUG", "false")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 0 disables the per-request deadline
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 0))
