"""
PostgreSQL implementation of the SQL base class.
"""

from dataclasses import dataclass
from typing import Any, Optional

import psycopg2

from ..config import PostgresSettings
from .dialects import PostgresDialect
from .sql import ServerSQL


@dataclass
class Postgres(ServerSQL):
    """
    Direct PostgreSQL connection using psycopg2.

    The connection runs in autocommit mode outside transactions, so every
    statement is committed immediately unless a transaction is open.

    :param host: Database host (DB_HOST).
    :param port: Database port (DB_PORT, default: 5432).
    :param database: Database name (DB_DATABASE).
    :param username: Database username (DB_USERNAME).
    :param password: Database password (DB_PASSWORD).
    :param options: Extra keyword arguments for psycopg2.connect().
    """

    db_type = "postgres"
    dialect = PostgresDialect()
    driver_errors = (psycopg2.Error,)
    settings_class = PostgresSettings

    def connect(self) -> None:
        """
        Establish a connection to the PostgreSQL database.

        :raises ConnectionFailure: If connecting fails.
        """
        if self.connection is not None:
            return

        try:
            self.connection = psycopg2.connect(
                host=self.host,
                port=self.port,
                dbname=self.database,
                user=self.username,
                password=self.password,
                **self.options,
            )
            self.connection.autocommit = True
        except psycopg2.Error as e:
            self.connection = None
            raise self._connection_failure("PostgreSQL", e) from e

        self.logger.info("Connected to PostgreSQL database", database=self.database)

    def last_insert_id(self, name: Optional[str] = None) -> Any:
        """
        Return the last value produced by a sequence in this session.

        Uses CURRVAL(name) when a sequence name is given, LASTVAL() otherwise.
        Inside a transaction the lookup runs under a savepoint so a missing
        sequence value does not abort the caller's transaction.

        :return: The id, or None if no sequence value is available.
        """
        self._ensure_connection()
        if name is None:
            sql, params = "SELECT LASTVAL()", None
        else:
            sql, params = "SELECT CURRVAL(%s)", [name]

        with self.connection.cursor() as cursor:
            if self.in_transaction:
                cursor.execute("SAVEPOINT ff_sql_last_insert_id")
            try:
                cursor.execute(sql, params)
                row = cursor.fetchone()
            except psycopg2.Error:
                if self.in_transaction:
                    cursor.execute("ROLLBACK TO SAVEPOINT ff_sql_last_insert_id")
                return None
            if self.in_transaction:
                cursor.execute("RELEASE SAVEPOINT ff_sql_last_insert_id")

        return row[0] if row else None

    def _begin(self) -> None:
        # psycopg2 opens the transaction implicitly on the next statement
        self.connection.autocommit = False

    def _commit(self) -> None:
        self.connection.commit()
        self.connection.autocommit = True

    def _rollback(self) -> None:
        try:
            self.connection.rollback()
        finally:
            self.connection.autocommit = True
