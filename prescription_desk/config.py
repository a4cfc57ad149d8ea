"""
Configuration settings for the prescription desk.

Uses Pydantic Settings to load environment variables for the database connection,
logging, list/paging defaults, and export naming.
"""
from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from prescription_desk.domain.models import DEPARTMENTS


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("prescription_desk", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(30_000, alias="DB_STATEMENT_TIMEOUT_MS")
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS")
    records_table: str = Field("prescriptions", alias="RECORDS_TABLE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    local_timezone: str = Field("Asia/Kolkata", alias="LOCAL_TIMEZONE")

    # List screen
    page_size: int = Field(10, alias="PAGE_SIZE", gt=0)
    refresh_interval_seconds: float = Field(30.0, alias="REFRESH_INTERVAL_SECONDS", gt=0)
    departments: List[str] = Field(default_factory=lambda: list(DEPARTMENTS), alias="DEPARTMENTS")

    # Exports
    export_dir: str = Field("exports", alias="EXPORT_DIR")
    export_entity: str = Field("Hospital_Prescriptions", alias="EXPORT_ENTITY")
    report_title: str = Field("Hospital Prescriptions Report", alias="REPORT_TITLE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
