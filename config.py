"""
Environment-driven settings for the Portfolio API.

Values are read once at import time, so set the environment before
importing the app.
"""
import os

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "portfolio")

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "super-secret-key-change")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

# Absolute prefix for relative asset paths, e.g. https://api.example.com
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "").rstrip("/")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV.lower() == "production"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
