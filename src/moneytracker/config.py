"""Application configuration using pydantic-settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from MONEYTRACKER_* environment variables."""

    # Database
    database_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Mailbox scanning
    imap_timeout_seconds: float = 30.0
    default_imap_port: int = 993
    scan_max_workers: int = 4
    scan_run_timeout_seconds: float = 300.0

    # Categories auto-created during ingestion
    default_category_color: str = "#667eea"

    # Used when a user has no timezone of their own
    default_timezone: str = "UTC"

    # Outbound notification email (disabled while smtp_host is empty)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_sender: str = "moneytracker@localhost"
    smtp_use_tls: bool = True
    smtp_timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="MONEYTRACKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def resolve_database_path(self) -> str:
        """Return the configured database path, defaulting to ~/.moneytracker/moneytracker.db."""
        if self.database_path:
            return self.database_path
        db_dir = Path.home() / ".moneytracker"
        db_dir.mkdir(exist_ok=True)
        return str(db_dir / "moneytracker.db")


settings = Settings()
