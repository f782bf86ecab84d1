"""
ReadTrack Application Configuration
"""
import os
from typing import Dict, Any
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Application settings"""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_NAME: str = "ReadTrack"
    LOG_LEVEL: str = "INFO"

    # db paths
    SQLITE_DB_FILE: str = "data/readtrack.db"

    # single-user deployments read and write under this id
    DEFAULT_USER_ID: str = "local"

    # pagination, chars per page
    TARGET_PAGE_SIZE: int = 3000

    # scroll tracking
    SCROLL_NOISE_THRESHOLD: int = 5
    SCROLL_PROGRESS_CAP: float = 99.0

    # slider values at or above this mark the work completed
    COMPLETION_THRESHOLD: float = 99.0

    SAVE_DEBOUNCE_MS: int = 2000
    MAX_READING_SESSIONS: int = 256

    @field_validator("SQLITE_DB_FILE")
    @classmethod
    def create_db_directory(cls, db_file):
        """Ensure the sqlite directory exists"""
        db_dir = os.path.dirname(db_file)
        if db_dir: os.makedirs(db_dir, exist_ok=True)
        return db_file

    @field_validator("TARGET_PAGE_SIZE")
    @classmethod
    def positive_page_size(cls, page_size):
        if page_size <= 0:
            raise ValueError("TARGET_PAGE_SIZE must be positive")
        return page_size

    def get_reader_config(self) -> Dict[str, Any]:
        """Return reading engine tuning as a dictionary"""
        return {
            "target_page_size": self.TARGET_PAGE_SIZE,
            "scroll_noise_threshold": self.SCROLL_NOISE_THRESHOLD,
            "scroll_progress_cap": self.SCROLL_PROGRESS_CAP,
            "completion_threshold": self.COMPLETION_THRESHOLD,
            "save_delay": self.SAVE_DEBOUNCE_MS / 1000.0,
        }

settings = Settings()
