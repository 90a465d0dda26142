# planner/config.py

import os

from dotenv import load_dotenv

# ---------------- ENV ----------------
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"))
load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Database (local SQLite when DATABASE_URL is not provided)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./planner.db")
SQL_ECHO = _env_bool("SQL_ECHO")

# JWT
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY missing in .env!")

# CORS
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000",
    ).split(",")
    if origin.strip()
]
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN")
if FRONTEND_ORIGIN:
    CORS_ALLOW_ORIGINS.append(FRONTEND_ORIGIN)

# Timeline
DEFAULT_DAY_WIDTH = int(os.getenv("DEFAULT_DAY_WIDTH", "40"))
MIN_DAY_WIDTH = int(os.getenv("MIN_DAY_WIDTH", "20"))
MAX_DAY_WIDTH = int(os.getenv("MAX_DAY_WIDTH", "100"))
TIMELINE_BUFFER_DAYS = int(os.getenv("TIMELINE_BUFFER_DAYS", "7"))

# Projects
DEFAULT_PROJECT_DAYS = int(os.getenv("DEFAULT_PROJECT_DAYS", "30"))
DEFAULT_PROJECT_COLOR = os.getenv("DEFAULT_PROJECT_COLOR", "#3b82f6")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Uvicorn server settings
UVICORN_HOST = os.getenv("UVICORN_HOST", "127.0.0.1")
UVICORN_PORT = int(os.getenv("UVICORN_PORT", "8000"))
