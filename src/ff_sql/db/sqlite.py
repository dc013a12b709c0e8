"""
SQLite implementation of the SQL base class.
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional

from ..config import SQLiteSettings
from ..exceptions import ConnectionFailure
from .dialects import SQLiteDialect
from .sql import SQL, _error_code


@dataclass
class SQLite(SQL):
    """
    SQLite connection using the standard library sqlite3 module.

    The connection runs in autocommit mode; transactions are opened
    explicitly with ``begin_transaction()`` or ``transaction()``.
    Foreign key enforcement is switched on after connecting.

    :param path: Database file, or ':memory:'. Falls back to DB_SQLITE_PATH,
        then to ':memory:'.
    """

    db_type = "sqlite"
    dialect = SQLiteDialect()
    driver_errors = (sqlite3.Error,)

    path: Optional[str] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self.path = SQLiteSettings.resolve(self.path).sqlite_path

    def connect(self) -> None:
        """
        Open the SQLite database.

        :raises ConnectionFailure: If the file cannot be opened.
        """
        if self.connection is not None:
            return

        try:
            self.connection = sqlite3.connect(self.path, isolation_level=None)
            self.connection.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            self.connection = None
            self.logger.error("Failed to connect to SQLite", path=self.path)
            raise ConnectionFailure(
                debug_message=f"SQLite connection failed: {e}", code=_error_code(e)
            ) from e

        self.logger.info("Connected to SQLite database", path=self.path)

    def _begin(self) -> None:
        self.connection.execute("BEGIN")
