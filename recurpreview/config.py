from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    database_url: str
    default_preview_count: int
    max_preview_count: int
    app_host: str
    app_port: int
    sqlite_busy_timeout_ms: int
    log_level: str


def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./recurpreview.db"),
        default_preview_count=int(os.getenv("DEFAULT_PREVIEW_COUNT", "20")),
        max_preview_count=int(os.getenv("MAX_PREVIEW_COUNT", "500")),
        app_host=os.getenv("APP_HOST", "0.0.0.0"),
        app_port=int(os.getenv("APP_PORT", "8000")),
        sqlite_busy_timeout_ms=int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
