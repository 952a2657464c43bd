# finance_backend/config.py
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
DATA_DIR = os.path.join(BASE_DIR, "data")


def load_config():
    """Build the Flask config mapping from the environment"""
    expires_days = int(os.environ.get("JWT_ACCESS_TOKEN_EXPIRES_DAYS", 7))
    cors_origins = os.environ.get("CORS_ORIGINS", "http://localhost:8501,http://localhost:3000")

    return {
        "DB_PATH": os.environ.get("DB_PATH", os.path.join(DATA_DIR, "finance.db")),
        "JWT_SECRET_KEY": os.environ.get("JWT_SECRET_KEY", "dev-key-change-me"),
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(days=expires_days),
        "CORS_ORIGINS": [o.strip() for o in cors_origins.split(",") if o.strip()],
        "UPLOAD_FOLDER": os.environ.get("UPLOAD_FOLDER", os.path.join(DATA_DIR, "uploads")),
        "MAX_CONTENT_LENGTH": int(os.environ.get("MAX_UPLOAD_BYTES", 5 * 1024 * 1024)),
        "LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO"),
        "PORT": int(os.environ.get("PORT", 5050)),
    }
