# bookstore/config.py
"""
Runtime configuration for the bookstore API.

Values are read from the environment once per process. Defaults are meant
for local development only (SQLite file in the working directory, a
throw-away JWT secret).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./bookstore.db"
    jwt_secret: str = "secretkey"
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60 * 24
    log_level: str = "INFO"


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        jwt_secret=os.getenv("JWT_SECRET", defaults.jwt_secret),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
        jwt_expires_minutes=int(
            os.getenv("JWT_EXPIRES_MINUTES", str(defaults.jwt_expires_minutes))
        ),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def configure_logging(level: str = "INFO") -> None:
    # basicConfig is a no-op once the root logger has handlers
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
