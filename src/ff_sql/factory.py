"""
Factory functions returning connected drivers.

Configuration priority: explicit config > DB_* environment > .env > defaults.

Usage:
    db = ff_sql.mysql({"host": "localhost", "database": "app", "username": "app"})
    db = ff_sql.postgres(host="localhost", database="app", username="app")
    db = ff_sql.sqlite(":memory:")
"""

from typing import Any, Dict, Optional

from .db.mysql import MySQL
from .db.postgres import Postgres
from .db.query_builder import Raw
from .db.sqlite import SQLite


def mysql(config: Optional[Dict[str, Any]] = None, **overrides: Any) -> MySQL:
    """
    Create a MySQL connection.

    Falls back to DB_HOST, DB_DATABASE, DB_USERNAME, DB_PASSWORD, DB_PORT
    and DB_CHARSET for values not given.

    :raises ConnectionFailure: If required config is missing or connecting fails.
    """
    db = MySQL(**{**(config or {}), **overrides})
    db.connect()
    return db


def postgres(config: Optional[Dict[str, Any]] = None, **overrides: Any) -> Postgres:
    """
    Create a PostgreSQL connection.

    Falls back to DB_HOST, DB_DATABASE, DB_USERNAME, DB_PASSWORD and DB_PORT
    for values not given.

    :raises ConnectionFailure: If required config is missing or connecting fails.
    """
    db = Postgres(**{**(config or {}), **overrides})
    db.connect()
    return db


def sqlite(path: Optional[str] = None, **kwargs: Any) -> SQLite:
    """
    Create a SQLite connection.

    :param path: Database file or ':memory:'. Falls back to DB_SQLITE_PATH,
        then to ':memory:'.
    :raises ConnectionFailure: If the database cannot be opened.
    """
    db = SQLite(path=path, **kwargs)
    db.connect()
    return db


def raw(value: str) -> Raw:
    """
    Create a raw SQL expression that will not be quoted.

    Never pass untrusted input: this bypasses identifier quoting.

    Example:
        db.table("users").select([raw("COUNT(*) as total")]).get()
    """
    return Raw(value)
