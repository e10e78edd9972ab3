"""Tool configuration from environment (.env supported)."""
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

# Load .env from the working directory so AUDIT_SETUP_* vars are available everywhere
_env_path = Path.cwd() / ".env"
load_dotenv(dotenv_path=_env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="AUDIT_SETUP_",
        env_file=str(_env_path),
        extra="ignore",
    )

    db_driver: str = "mysql+pymysql"
    db_host: str = ""
    db_port: int = 3306
    db_user: str = ""
    db_password: str = ""
    db_name: str = ""
    connect_timeout: int = 10

    @field_validator("db_host", "db_user", "db_name", mode="before")
    @classmethod
    def strip_credentials(cls, v: str) -> str:
        return (v or "").strip()

    page_size: int = 10
    log_file: str = "audit_log_setup.log"
    log_level: str = "INFO"

    @field_validator("page_size")
    @classmethod
    def positive_page_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("page_size must be at least 1")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


class SessionContext(BaseModel):
    """Connection details for one interactive session. Passed explicitly, never global."""
    model_config = ConfigDict(frozen=True)

    host: str = "localhost"
    port: int = 3306
    user: str
    password: str = Field(repr=False)
    database: str
    driver: str = "mysql+pymysql"
    connect_timeout: int = 10

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "SessionContext":
        values = {
            "host": settings.db_host or "localhost",
            "port": settings.db_port,
            "user": settings.db_user,
            "password": settings.db_password,
            "database": settings.db_name,
            "driver": settings.db_driver,
            "connect_timeout": settings.connect_timeout,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
