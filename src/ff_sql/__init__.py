"""
ff-sql: Thin convenience layer over DB-API database clients.

Features:
- SQLite, PostgreSQL and MySQL drivers with env-based configuration
- CRUD helpers with safety gates against WHERE-less UPDATE/DELETE
- Fluent query builder with identifier quoting and operator whitelisting
- Transactions with automatic rollback
- Event hooks for queries, errors and transactions
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ff-sql")
except PackageNotFoundError:
    __version__ = "1.0.0"

from .config import ConnectionSettings, MySQLSettings, PostgresSettings, SQLiteSettings
from .db import (
    SQL,
    MySQL,
    MySQLDialect,
    Postgres,
    PostgresDialect,
    QueryBuilder,
    Raw,
    SqlDialect,
    SQLite,
    SQLiteDialect,
)
from .exceptions import ConnectionFailure, FFSQLError, QueryFailure, TransactionFailure
from .factory import mysql, postgres, raw, sqlite
from .hooks import HookRegistry
from .log import NullLogger, ScopedLogger, get_logger

__all__ = [
    "__version__",
    # Factory
    "mysql",
    "postgres",
    "sqlite",
    "raw",
    # Drivers
    "SQL",
    "SQLite",
    "Postgres",
    "MySQL",
    # Dialects
    "SqlDialect",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
    # Query builder
    "QueryBuilder",
    "Raw",
    # Settings
    "ConnectionSettings",
    "PostgresSettings",
    "MySQLSettings",
    "SQLiteSettings",
    # Exceptions
    "FFSQLError",
    "ConnectionFailure",
    "QueryFailure",
    "TransactionFailure",
    # Hooks and logging
    "HookRegistry",
    "ScopedLogger",
    "NullLogger",
    "get_logger",
]
