"""
MySQL implementation of the SQL base class.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import mysql.connector

from ..config import MySQLSettings
from .dialects import MySQLDialect
from .sql import ServerSQL


@dataclass
class MySQL(ServerSQL):
    """
    Direct MySQL connection using mysql-connector-python.

    The connection runs in autocommit mode outside transactions.

    :param host: Database host (DB_HOST).
    :param port: Database port (DB_PORT, default: 3306).
    :param database: Database name (DB_DATABASE).
    :param username: Database username (DB_USERNAME).
    :param password: Database password (DB_PASSWORD).
    :param charset: Connection charset (default: utf8mb4).
    :param options: Extra keyword arguments for mysql.connector.connect().
    """

    db_type = "mysql"
    dialect = MySQLDialect()
    driver_errors = (mysql.connector.Error,)
    settings_class = MySQLSettings

    charset: Optional[str] = None

    def _explicit_config(self) -> Dict[str, Any]:
        return {**super()._explicit_config(), "charset": self.charset}

    def _apply_settings(self, settings: MySQLSettings) -> None:
        super()._apply_settings(settings)
        self.charset = settings.charset

    def connect(self) -> None:
        """
        Establish a connection to the MySQL database.

        :raises ConnectionFailure: If connecting fails.
        """
        if self.connection is not None:
            return

        try:
            self.connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.username,
                password=self.password or "",
                charset=self.charset,
                autocommit=True,
                **self.options,
            )
        except mysql.connector.Error as e:
            self.connection = None
            raise self._connection_failure("MySQL", e) from e

        self.logger.info("Connected to MySQL database", database=self.database)

    def _cursor(self):
        # Buffered so a statement never blocks on unread rows of the previous one
        return self.connection.cursor(buffered=True)

    def _begin(self) -> None:
        self.connection.start_transaction()
