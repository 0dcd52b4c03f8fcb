from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./coursereview.db"

    # JWT Authentication
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    # Admin tokens are short-lived and carry an explicit "admin" scope
    ADMIN_TOKEN_EXPIRE_MINUTES: int = 15

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Sign-up is limited to university mailboxes
    ALLOWED_EMAIL_DOMAINS: List[str] = ["ogr.iuc.edu.tr"]

    # Reviews & statistics
    MIN_REVIEWS_FOR_DISPLAY: int = 10
    MAX_COMMENT_LENGTH: int = 300
    MAX_SURVIVAL_GUIDE_LENGTH: int = 280
    TROLL_VOTE_THRESHOLD: int = 3
    GRADE_HEURISTIC_CLAMP_AT_100: bool = True

    # File uploads
    MAX_FILE_SIZE: int = 50 * 1024 * 1024
    ALLOWED_FILE_TYPES: List[str] = [
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
        "image/jpeg",
        "image/png",
    ]

    # Object storage
    STORAGE_BACKEND: str = "local"  # "local" or "s3"
    STORAGE_LOCAL_ROOT: str = "./storage"
    STORAGE_PUBLIC_BASE_URL: str = "http://localhost:8000/files/raw"
    STORAGE_BUCKET: str = "course-files"
    S3_ENDPOINT_URL: Optional[str] = None
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "eu-central-1"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
