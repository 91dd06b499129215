"""Application settings loaded from environment variables."""
import os
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class Settings(BaseSettings):
    """
    Runtime configuration for the upload service.

    Every field can be set with an ``EXCEL_`` prefixed environment variable
    or in a local ``.env`` file, e.g. ``EXCEL_UNKNOWN_SHEETS=skip``.

    Attributes:
        log_dir: Directory receiving the daily log file
        log_level: Root logging level
        unknown_sheets: ``validate`` runs sheets without a registered schema
            through the record schema, ``skip`` leaves them out of the result
        cors_origins: Origins allowed by the CORS middleware
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="EXCEL_",
        case_sensitive=False,
        extra="ignore",
    )

    log_dir: str = Field(default=os.path.join(BASE_DIR, "logs"))
    log_level: LogLevel = "INFO"
    unknown_sheets: Literal["validate", "skip"] = "validate"
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


@lru_cache
def get_settings() -> Settings:
    return Settings()
