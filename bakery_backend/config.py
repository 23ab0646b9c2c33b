"""
Configuration settings for the Bakery Backend.

Uses Pydantic Settings to load environment variables (and an optional `.env`
file) for the store address, logging and the GraphQL server. `POSTGRES_URL`
and `POSTGRES_DATABASE` are required; everything else has a default.
"""
from __future__ import annotations

from functools import lru_cache

from psycopg import ProgrammingError
from psycopg.conninfo import conninfo_to_dict
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from bakery_backend.errors import ConfigurationError


class Settings(BaseSettings):
    # Database
    postgres_url: str = Field(..., alias="POSTGRES_URL")
    postgres_database: str = Field(..., alias="POSTGRES_DATABASE")
    db_pool_min_size: int = Field(1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, alias="DB_POOL_MAX_SIZE")
    db_connect_timeout: float = Field(10.0, alias="DB_CONNECT_TIMEOUT")
    db_connect_attempts: int = Field(3, alias="DB_CONNECT_ATTEMPTS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # GraphQL server
    server_host: str = Field("127.0.0.1", alias="SERVER_HOST")
    server_port: int = Field(8000, alias="SERVER_PORT")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        """Store address joined with the database name."""
        return f"{self.postgres_url.rstrip('/')}/{self.postgres_database}"

    @property
    def safe_dsn(self) -> str:
        """`user@host:port/database` for display; the password never appears."""
        return redact_dsn(self.dsn)


def redact_dsn(dsn: str) -> str:
    try:
        params = conninfo_to_dict(dsn)
    except ProgrammingError:
        return "<unparseable connection string>"
    user = params.get("user")
    prefix = f"{user}@" if user else ""
    host = params.get("host") or "localhost"
    port = params.get("port") or "5432"
    return f"{prefix}{host}:{port}/{params.get('dbname', '')}"


def _describe(exc: ValidationError) -> str:
    missing = []
    invalid = []
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else "?"
        if error["type"] == "missing":
            missing.append(name)
        else:
            invalid.append(f"{name} ({error['msg']})")
    parts = []
    if missing:
        parts.append("missing " + ", ".join(missing))
    if invalid:
        parts.append("invalid " + ", ".join(invalid))
    return "; ".join(parts) or str(exc)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.

    Raises
    ------
    ConfigurationError
        If a required variable is absent or a value cannot be parsed.
    """
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {_describe(exc)}") from exc


__all__ = ["Settings", "get_settings", "redact_dsn"]
