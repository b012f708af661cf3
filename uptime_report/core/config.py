"""
Configuration settings for the Uptime Report Service
"""

from datetime import timedelta
from typing import List

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

from uptime_report.core.errors import ConfigError

KNOWN_SINKS = ("email", "database")


class Settings(BaseSettings):
    """Application settings"""

    # Database (report history)
    db_host: str = "postgres"
    db_port: str = "5432"
    db_name: str = "uptime_report_db"
    db_user: str = "report_user"
    db_password: str = "report_password"
    database_url: str = ""

    # Elasticsearch (status store)
    elasticsearch_url: str = "http://localhost:9200"
    elasticsearch_index: str = "sms_container"
    elasticsearch_timeout: float = 30.0

    # Redis (entity registry)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0
    registry_key: str = "containers"

    # Mail
    mail_username: str = ""
    mail_password: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Report scheduling
    report_interval: timedelta = timedelta(hours=24)
    report_recipient: str = ""
    report_sinks: List[str] = ["email"]

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8084
    debug: bool = False

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Build database_url from components unless given explicitly
        if not self.database_url:
            self.database_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @field_validator("report_interval")
    @classmethod
    def _positive_interval(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("report_interval must be positive")
        return value

    @field_validator("redis_db")
    @classmethod
    def _non_negative_db(cls, value: int) -> int:
        if value < 0:
            raise ValueError("redis_db must not be negative")
        return value

    @field_validator("report_sinks")
    @classmethod
    def _known_sinks(cls, value: List[str]) -> List[str]:
        unknown = [name for name in value if name not in KNOWN_SINKS]
        if unknown:
            raise ValueError(f"unknown report sinks: {', '.join(unknown)}")
        return value


def load_settings(**overrides) -> Settings:
    """Build settings from the environment, raising ConfigError when invalid"""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(str(e)) from e


# Global settings instance
settings = load_settings()
