"""
Mess ledger settings.

Everything is read from the environment (or a local .env file). Each
section has its own prefix, e.g. STORAGE_DB_NAME or LEDGER_DEFAULT_UOM.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Where the ledger database lives and how it is opened."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "messledger.db"

    # Writers queue on SQLite's lock; keep the pool small
    pool_size: int = Field(default=5, ge=1, le=32)
    busy_timeout: int = Field(default=30000, ge=0)  # ms

    # Copy the database file aside before applying migrations
    backup_before_migrate: bool = True

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class LedgerSettings(BaseSettings):
    """Bookkeeping defaults."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    default_uom: str = "kg"

    @field_validator("default_uom")
    @classmethod
    def uom_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("default_uom must not be blank")
        return v


class APISettings(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]
    actor_header: str = "X-Actor"


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Mess Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def create_data_dir(cls, v: Any) -> StorageSettings:
        storage = StorageSettings(**v) if isinstance(v, dict) else (v or StorageSettings())
        storage.data_dir.mkdir(parents=True, exist_ok=True)
        return storage


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget loaded settings so the next call re-reads the environment."""
    global _settings
    _settings = None
