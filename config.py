# config.py
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).parent / ".env")

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database (SQLite for development, PostgreSQL in production)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./acai_prime.db")
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

# Session
SECRET_KEY = os.getenv("SECRET_KEY", "acai-prime-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "acai_session")
PASSWORD_HASH_ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", "200000"))

# Login rate limit: 5 attempts per IP per 15 minutes
LOGIN_MAX_ATTEMPTS = int(os.getenv("LOGIN_MAX_ATTEMPTS", "5"))
LOGIN_WINDOW_SECONDS = int(os.getenv("LOGIN_WINDOW_SECONDS", str(15 * 60)))

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:5000,http://127.0.0.1:5000").split(",")
    if origin.strip()
]

# Pagou.ai PIX gateway
PAGOUAI_API_KEY = os.getenv("PAGOUAI_API_KEY") or None
PAGOUAI_BASE_URL = os.getenv("PAGOUAI_BASE_URL", "https://api.pagou.ai/v1").rstrip("/")
PAGOUAI_TIMEOUT = float(os.getenv("PAGOUAI_TIMEOUT", "10"))
PAGOUAI_WEBHOOK_SECRET = os.getenv("PAGOUAI_WEBHOOK_SECRET") or None

# Uploaded images are served from /attached_assets
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(Path(__file__).parent / "attached_assets")))
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

SEED_SAMPLE_DATA = os.getenv("SEED_SAMPLE_DATA", "true").lower() in ("1", "true", "yes")

DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@acaiprime.com")
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "admin123")

PORT = int(os.getenv("PORT", "5000"))
