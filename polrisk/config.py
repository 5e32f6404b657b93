"""Configuration management using Pydantic Settings"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="POLRISK_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Data files
    data_dir: Path = Path("data")
    current_file: str = "current.json"
    history_dir: str = "history"
    changes_file: str = "historical-changes.json"
    categories_file: str = "categories.json"

    # Archive cadence
    archive_day: int = 20  # Snapshots are pinned to this day of the month

    # Service
    service_name: str = "polrisk"
    log_level: str = "INFO"
    log_format: str = "json"  # json | text

    # Prometheus textfile collector output (unset = no metrics file)
    metrics_textfile: Optional[Path] = None

    @property
    def current_path(self) -> Path:
        return self.data_dir / self.current_file

    @property
    def history_path(self) -> Path:
        return self.data_dir / self.history_dir

    @property
    def changes_path(self) -> Path:
        return self.data_dir / self.changes_file

    @property
    def categories_path(self) -> Path:
        return self.data_dir / self.categories_file


settings = Settings()
