"""
Configuration for the filecast service.

A single Settings class holds every environment variable the API, the
storage backends and the notification hub read.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Settings for the filecast service.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "filecast"
    SERVICE_VERSION: str = "1.0.0"

    # MinIO Configuration
    MINIO_ENDPOINT: str = "localhost:9000"
    MINIO_ACCESS_KEY: str = "minioadmin"
    MINIO_SECRET_KEY: str = "minioadmin"
    MINIO_BUCKET: str = "uploads"
    MINIO_SECURE: bool = False

    # Local filesystem backend (development without MinIO)
    USE_LOCAL_STORAGE: bool = False
    LOCAL_STORAGE_PATH: str = "/tmp/filecast-storage"

    # Upload limits
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10 MB
    UPLOAD_CHUNK_BYTES: int = 1024 * 1024

    # Upper bound for a single websocket send during a broadcast
    NOTIFY_SEND_TIMEOUT_SECONDS: float = 5.0

    # Static frontend, mounted at "/" when the directory exists
    STATIC_DIR: str = str(PROJECT_ROOT / "static")

    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:3000",
    ]

    # App host/port
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8080

    LOG_LEVEL: str = "INFO"
    # One JSON object per line instead of the colored console format
    LOG_JSON: bool = False

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
