# backend/heyu_booking/config.py

from pathlib import Path
from typing import Optional
from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root


class Settings(BaseSettings):
    database_url: str = "sqlite:///./data/heyu.db"
    redis_url: Optional[str] = None

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Booking rules
    enforce_slot_availability: bool = False
    availability_cache_ttl: int = 300
    # Weekday (0 = Monday) → closing hour, overrides the built-in rule
    closing_hours: Optional[dict[int, int]] = None

    # SMTP
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_from: Optional[str] = None
    smtp_secure: bool = False

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_prefix="HEYU_",
        extra="ignore",
    )

    @property
    def resolved_database_url(self) -> str:
        url = self.database_url
        if url.startswith("sqlite:///./"):
            # Relative sqlite path → absolute, anchored at repo root
            relative_path = url.replace("sqlite:///./", "")
            absolute_path = BASE_DIR / relative_path
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite:///{absolute_path}"
        return url

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass)


settings = Settings()


# Dependency for FastAPI
def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", settings)
