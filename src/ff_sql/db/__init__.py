"""
Database connection and operation modules.
"""

from .dialects import MySQLDialect, PostgresDialect, SqlDialect, SQLiteDialect
from .mysql import MySQL
from .postgres import Postgres
from .query_builder import QueryBuilder, Raw
from .sql import SQL, ServerSQL
from .sqlite import SQLite

__all__ = [
    "SQL",
    "ServerSQL",
    # Drivers
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
]
