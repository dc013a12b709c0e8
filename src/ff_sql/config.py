"""
Connection settings for the ff-sql drivers.

Values are resolved with the following priority:
explicit arguments > process environment (DB_*) > .env file > defaults.
"""

from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POSTGRES_PORT = 5432
DEFAULT_MYSQL_PORT = 3306
DEFAULT_SQLITE_PATH = ":memory:"


class ConnectionSettings(BaseSettings):
    """Settings shared by the server-based drivers."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    options: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("port", mode="before")
    @classmethod
    def _ignore_non_numeric_port(cls, value: Any) -> Any:
        # A non-numeric DB_PORT falls back to the dialect default
        if isinstance(value, str) and not value.strip().isdigit():
            return None
        return value

    @classmethod
    def resolve(cls, config: Optional[Dict[str, Any]] = None, **overrides: Any):
        """
        Build settings from an explicit config record plus overrides.

        Explicit ``None`` values are treated as "not given" so the
        environment can still fill them in.

        Args:
            config: Configuration record (host, port, database, ...)
            **overrides: Keyword values taking precedence over ``config``

        Returns:
            Settings instance with defaults applied
        """
        explicit = {**(config or {}), **overrides}
        explicit = {key: value for key, value in explicit.items() if value is not None}
        settings = cls(**explicit)
        if settings.port is None:
            settings.port = cls.default_port()
        return settings

    @classmethod
    def default_port(cls) -> Optional[int]:
        return None

    def missing_required(self) -> bool:
        """Return True if host, database or username is not set."""
        return self.host is None or self.database is None or self.username is None


class PostgresSettings(ConnectionSettings):
    """PostgreSQL settings (default port 5432)."""

    @classmethod
    def default_port(cls) -> int:
        return DEFAULT_POSTGRES_PORT


class MySQLSettings(ConnectionSettings):
    """MySQL settings (default port 3306, utf8mb4 charset)."""

    charset: str = "utf8mb4"

    @classmethod
    def default_port(cls) -> int:
        return DEFAULT_MYSQL_PORT


class SQLiteSettings(BaseSettings):
    """SQLite settings; only the database path is configurable."""

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    sqlite_path: str = DEFAULT_SQLITE_PATH

    @classmethod
    def resolve(cls, path: Optional[str] = None) -> "SQLiteSettings":
        if path is None:
            return cls()
        return cls(sqlite_path=path)
