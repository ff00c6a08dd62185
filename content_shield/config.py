from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Content Shield"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str = "sqlite+aiosqlite:///./content_shield.db"

    # Security settings
    secret_key: str = "content-shield-secret"
    access_token_expire_minutes: int = 60 * 24 * 7

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Storage settings
    upload_dir: Path = Path("uploads")
    temp_upload_dir: Path = Path("temp-uploads")
    max_upload_size: int = 10 * 1024 * 1024  # 10MB

    # Catalogue settings
    default_paid_price: int = 599  # minor currency units
    trending_limit: int = 3

    # Logging settings
    log_level: str = "INFO"
    log_json: bool = True

    # Optional admin account created on startup
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
