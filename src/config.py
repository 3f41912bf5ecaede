"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 4000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

API_PREFIX = "/api"
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# Storage
DATA_DIR = Path(os.getenv("DATA_DIR", BASE_DIR / "data"))
DB_FILE = DATA_DIR / "db.json"

# Request limits
MAX_BODY_SIZE = 2 * 1024 * 1024  # 2 MB
RATE_LIMIT_REQUESTS = 500
RATE_LIMIT_WINDOW = 15 * 60  # seconds
RATE_LIMIT_BACKEND = os.getenv("RATE_LIMIT_BACKEND", "memory").lower()

REDIS_CONFIG = {
    "host": os.getenv("REDIS_HOST", "localhost"),
    "port": int(os.getenv("REDIS_PORT", 6379)),
    "db": int(os.getenv("REDIS_DB", 0)),
}
