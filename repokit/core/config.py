from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPOKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="repokit", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment mode"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )

    # Persistence unit
    database_url: str = Field(
        default="sqlite:///./repokit.db", description="SQLAlchemy database URL"
    )
    persistence_unit: str = Field(
        default="site", description="Name of the persistence unit the factory is bound to"
    )
    pool_size: int = Field(default=5, ge=1, description="Connection pool size")
    max_overflow: int = Field(
        default=10, ge=0, description="Connections allowed beyond the pool size"
    )
    pool_timeout: int = Field(
        default=30, ge=1, description="Seconds to wait for a pooled connection"
    )
    echo_sql: bool = Field(default=False, description="Log emitted SQL statements")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @model_validator(mode="after")
    def force_json_in_production(self) -> "Settings":
        if self.environment == "production":
            self.log_format = "json"
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
