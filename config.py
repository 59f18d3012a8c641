"""Configuration for Arena-Core."""
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{Path(__file__).parent / 'arena.db'}",
)

# HTTP server
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", os.getenv("PORT", "13776")))
API_RELOAD = os.getenv("API_RELOAD", "").lower() in ("1", "true", "yes")


def _parse_origins(value: str) -> list[str]:
    if not value:
        return ["*"]
    return [x.strip() for x in value.split(",") if x.strip()]


CORS_ORIGINS = _parse_origins(os.getenv("CORS_ORIGINS", ""))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Operator auth (JWT secret, initial admin bootstrap)
JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-use-long-random-string")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", "7"))
INITIAL_ADMIN_USERNAME = os.getenv("INITIAL_ADMIN_USERNAME", "admin")
INITIAL_ADMIN_PASSWORD = os.getenv("INITIAL_ADMIN_PASSWORD", "")  # Set to bootstrap first admin
