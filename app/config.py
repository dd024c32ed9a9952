"""
Environment-driven settings for the hospital backend
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hospital.db")

# Session tokens
SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
ALGORITHM = "HS256"
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "7"))

# Password hashing work factor
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Frontends allowed to call the API with credentials
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
DASHBOARD_URL = os.getenv("DASHBOARD_URL", "http://localhost:5174")

RATE_LIMIT_ENABLED = _env_flag("RATE_LIMIT_ENABLED")

# Doctor avatar hosting
CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME", "")
CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY", "")
CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET", "")
