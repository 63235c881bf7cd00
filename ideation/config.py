"""
Ideation platform – Application configuration.
Reads environment variables from a .env file via pydantic-settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ── App ──
    APP_NAME: str = "Ideation Platform"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PLATFORM_URL: str = "http://127.0.0.1:8000"

    # ── Database ──
    DATABASE_URL: str = "sqlite+aiosqlite:///./ideation.db"

    # ── JWT ──
    SECRET_KEY: str = "change-me-to-a-random-secret"
    ALGORITHM: str = "HS256"
    # Sessions expire after three hours
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 180
    EMAIL_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # ── Object storage ──
    MEDIA_ROOT: str = "./media"
    MEDIA_URL: str = "/media"
    DEFAULT_IDEA_IMAGE_URL: str = "/media/defaults/idea.jpg"
    DEFAULT_PROFILE_PIC_URL: str = "/media/defaults/profile.png"

    # ── Mail transport (SMTP) ──
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    MAIL_FROM: str = ""

    # ── Daily recap ──
    # Enable on one worker only when running several
    RECAP_ENABLED: bool = True
    RECAP_HOUR_UTC: int = Field(default=7, ge=0, le=23)
    RECAP_INTERVAL_HOURS: int = 24
    RECAP_WINDOW_HOURS: int = 24

    # ── Validation ──
    IDEA_TITLE_MIN_LENGTH: int = 3
    IDEA_TITLE_MAX_LENGTH: int = 30
    PASSWORD_MIN_LENGTH: int = 8

settings = Settings()
