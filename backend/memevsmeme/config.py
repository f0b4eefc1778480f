from __future__ import annotations
import os
from pydantic import BaseModel

class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "memevsmeme-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Meme Vs Meme")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/memevsmeme_dev")
    s3_endpoint: str = os.getenv("S3_ENDPOINT", "http://minio:9000")
    s3_access_key: str = os.getenv("S3_ACCESS_KEY", "minioadmin")
    s3_secret_key: str = os.getenv("S3_SECRET_KEY", "minioadmin")
    s3_bucket_uploads: str = os.getenv("S3_BUCKET_UPLOADS", "memevsmeme-uploads-dev")
    max_upload_bytes: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))  # 5MB

    # Gemini (generative AI) configuration
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    gemini_text_model: str = os.getenv("GEMINI_TEXT_MODEL", "gemini-1.5-flash")
    gemini_image_model: str = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.0-flash-preview-image-generation")
    gemini_timeout_seconds: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "60"))

    # Challenge defaults
    challenge_duration_hours: int = int(os.getenv("CHALLENGE_DURATION_HOURS", "24"))
    default_max_submissions: int = int(os.getenv("DEFAULT_MAX_SUBMISSIONS", "50"))

    # Auth (HS256 JWT)
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret-change-me")
    jwt_algorithm: str = "HS256"
    access_ttl_min: int = int(os.getenv("ACCESS_TTL_MIN", "60"))
    refresh_ttl_min: int = int(os.getenv("REFRESH_TTL_MIN", "10080"))  # 7d

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

settings = Settings()
