"""
Runtime configuration.
Values come from the environment, with a .env file loaded once here.
"""

import os
from typing import List

from dotenv import load_dotenv

# Load .env only once here
load_dotenv()


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


class Config:
    """
    Settings read at import time.

    DATABASE_URL may be unset: the server still starts and the store
    routes answer 500 until a database is reachable.
    """

    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", 5000))
    DEBUG = os.getenv("FLASK_DEBUG", "false").lower() in ("1", "true", "yes")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    DATABASE_URL = os.getenv("DATABASE_URL")
    DB_POOL_MIN = int(os.getenv("DB_POOL_MIN", 1))
    DB_POOL_MAX = int(os.getenv("DB_POOL_MAX", 10))

    # Front-end origins allowed to call the API from a browser
    CORS_ORIGINS = _split_origins(
        os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173")
    )
