from pathlib import Path
import os

from dotenv import load_dotenv

# Load environment variables from repo root and package-level .env (if present).
REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(REPO_ROOT / ".env")
load_dotenv(Path(__file__).resolve().parent / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./habit_tracker.db")
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

_cors_origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
CORS_ORIGINS = [origin.strip() for origin in _cors_origins.split(",") if origin.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Reminder and history windows
REMINDER_INTERVAL_MINUTES = float(os.getenv("REMINDER_INTERVAL_MINUTES", "15"))
RECENT_WINDOW_DAYS = int(os.getenv("RECENT_WINDOW_DAYS", "30"))
HISTORY_WINDOW_DAYS = int(os.getenv("HISTORY_WINDOW_DAYS", "60"))
CHART_WINDOW_DAYS = int(os.getenv("CHART_WINDOW_DAYS", "14"))
ARCHIVE_AFTER_DAYS = int(os.getenv("ARCHIVE_AFTER_DAYS", "7"))
