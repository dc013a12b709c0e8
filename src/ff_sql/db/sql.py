"""
Generic SQL driver.

The dialect-specific drivers (SQLite, Postgres, MySQL) only open the
connection and adjust transaction control; everything else lives here:
- prepared statement execution with event hooks
- transactions with automatic rollback
- CRUD helpers and the fluent query builder entry point
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from ..config import ConnectionSettings
from ..exceptions import ConnectionFailure, QueryFailure, TransactionFailure
from ..hooks import HookCallback, HookRegistry
from ..log import get_logger
from .dialects import SqlDialect
from .query_builder import QueryBuilder

T = TypeVar("T")


def _error_code(error: BaseException) -> Any:
    """Best-effort driver error code (sqlite3, psycopg2, mysql.connector)."""
    for attr in ("sqlite_errorcode", "pgcode", "errno"):
        code = getattr(error, attr, None)
        if code is not None:
            return code
    return 0


@dataclass
class SQL(ABC):
    """
    Base class for database drivers.

    Subclasses set ``dialect`` and ``driver_errors`` and implement
    ``connect()``. Connections are opened lazily on first use.

    :param connection: An already opened DB-API connection (optional).
    :param logger: Logger instance (default: structlog scoped logger).
    """

    db_type: ClassVar[str] = "sql"
    dialect: ClassVar[SqlDialect]
    driver_errors: ClassVar[Tuple[Type[BaseException], ...]] = ()

    connection: Any = field(default=None, repr=False)
    logger: Any = field(default=None, repr=False)
    hooks: HookRegistry = field(default_factory=HookRegistry, repr=False)

    def __post_init__(self) -> None:
        if self.logger is None:
            self.logger = get_logger(f"ff_sql.{self.db_type}")
        self._in_transaction = False
        self._last_insert_id: Any = None

    # ==================== Connection ====================

    @abstractmethod
    def connect(self) -> None:
        """Open the connection; a no-op if one is already open."""

    def close_connection(self) -> None:
        """Close the connection if open."""
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            self._in_transaction = False
            self.logger.debug("Closed database connection")

    def _ensure_connection(self) -> None:
        if self.connection is None:
            self.connect()

    def _cursor(self):
        return self.connection.cursor()

    # ==================== Execution ====================

    def query(self, sql: str, params: Sequence[Any] = ()):
        """
        Execute a SQL statement and return the cursor.

        :param sql: SQL with dialect placeholders.
        :param params: Positional parameters to bind.
        :return: The executed DB-API cursor.
        :raises QueryFailure: If the driver rejects the statement.
        """
        self._ensure_connection()
        params = list(params)
        start = time.perf_counter()
        cursor = None

        try:
            cursor = self._cursor()
            if params:
                cursor.execute(sql, params)
            else:
                cursor.execute(sql)
        except self.driver_errors as e:
            if cursor is not None:
                cursor.close()
            raise self._query_failure(e, sql, params) from e

        # 0 is a valid id: MySQL reports it for tables without AUTO_INCREMENT
        lastrowid = getattr(cursor, "lastrowid", None)
        if lastrowid is not None:
            self._last_insert_id = lastrowid

        self.hooks.trigger(
            "query",
            {
                "sql": sql,
                "params": params,
                "duration": time.perf_counter() - start,
                "rows": cursor.rowcount,
            },
        )
        return cursor

    def _query_failure(self, error: BaseException, sql: str, params: List[Any]) -> QueryFailure:
        """Fire the error hook, log, and build the QueryFailure to raise."""
        code = _error_code(error)
        self.hooks.trigger(
            "error", {"sql": sql, "params": params, "error": str(error), "code": code}
        )
        self.logger.error("Query failed", error=str(error), sql=sql)
        return QueryFailure(debug_message=f"{error} | SQL: {sql} | Params: {params!r}", code=code)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Execute a statement and return the number of affected rows."""
        cursor = self.query(sql, params)
        try:
            return cursor.rowcount
        finally:
            cursor.close()

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a query and return every row as a dict."""
        cursor = self.query(sql, params)
        try:
            rows = cursor.fetchall() if cursor.description else []
            return self._rows_to_dicts(cursor, rows)
        except self.driver_errors as e:
            # sqlite3 steps through rows lazily, so errors can surface here
            raise self._query_failure(e, sql, list(params)) from e
        finally:
            cursor.close()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        """Execute a query and return the first row as a dict, or None."""
        cursor = self.query(sql, params)
        try:
            row = cursor.fetchone() if cursor.description else None
            if row is None:
                return None
            return self._rows_to_dicts(cursor, [row])[0]
        except self.driver_errors as e:
            raise self._query_failure(e, sql, list(params)) from e
        finally:
            cursor.close()

    @staticmethod
    def _rows_to_dicts(cursor, rows: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
        columns = [col[0] for col in cursor.description]
        return [dict(zip(columns, row)) for row in rows]

    def last_insert_id(self, name: Optional[str] = None) -> Any:
        """
        Return the id generated by the last INSERT.

        :param name: Sequence name (PostgreSQL only).
        :return: The id, or None if unavailable.
        """
        return self._last_insert_id

    # ==================== Transactions ====================

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def _begin(self) -> None:
        cursor = self._cursor()
        try:
            cursor.execute("BEGIN")
        finally:
            cursor.close()

    def _commit(self) -> None:
        self.connection.commit()

    def _rollback(self) -> None:
        self.connection.rollback()

    def begin_transaction(self) -> None:
        """:raises TransactionFailure: If a transaction is open or BEGIN fails."""
        self._ensure_connection()
        if self._in_transaction:
            raise TransactionFailure(
                message="Failed to begin transaction",
                debug_message="There is already an active transaction",
            )
        self._run_transaction_step(self._begin, "begin")
        self._in_transaction = True
        self.logger.debug("Transaction started")
        self.hooks.trigger("transaction.begin", {})

    def commit(self) -> None:
        """:raises TransactionFailure: If no transaction is open or COMMIT fails."""
        self._require_transaction("commit")
        self._run_transaction_step(self._commit, "commit")
        self._in_transaction = False
        self.logger.debug("Transaction committed")
        self.hooks.trigger("transaction.commit", {})

    def rollback(self) -> None:
        """:raises TransactionFailure: If no transaction is open or ROLLBACK fails."""
        self._require_transaction("rollback")
        try:
            self._run_transaction_step(self._rollback, "rollback")
        finally:
            # Nothing left to retry once ROLLBACK has been attempted
            self._in_transaction = False
        self.logger.debug("Transaction rolled back")
        self.hooks.trigger("transaction.rollback", {})

    def _require_transaction(self, action: str) -> None:
        if not self._in_transaction or self.connection is None:
            raise TransactionFailure(
                message=f"Failed to {action} transaction",
                debug_message="There is no active transaction",
            )

    def _run_transaction_step(self, step: Callable[[], None], action: str) -> None:
        try:
            step()
        except self.driver_errors as e:
            raise TransactionFailure(
                message=f"Failed to {action} transaction",
                debug_message=str(e),
                code=_error_code(e),
            ) from e

    def transaction(self, callback: Callable[["SQL"], T]) -> T:
        """
        Run ``callback(self)`` inside a transaction.

        Commits on success and returns the callback's result. On any
        exception the transaction is rolled back and the original exception
        is re-raised; a failing rollback is logged, never raised in its place.
        """
        self.begin_transaction()
        try:
            result = callback(self)
            self.commit()
        except Exception as error:
            if self._in_transaction:
                try:
                    self.rollback()
                except TransactionFailure as rollback_error:
                    self.logger.warning(
                        "Rollback failed after transaction error",
                        error=str(error),
                        rollback_error=rollback_error.debug_message,
                    )
            raise
        return result

    # ==================== Hooks ====================

    def on(self, event: str, callback: HookCallback) -> None:
        """
        Register a hook callback.

        Events: 'query', 'error', 'transaction.begin', 'transaction.commit',
        'transaction.rollback'.
        """
        self.hooks.on(event, callback)

    # ==================== CRUD Helper ====================

    def insert(self, table: str, data: Dict[str, Any]) -> Any:
        """
        Insert a row and return the last insert id.

        :raises QueryFailure: If data is empty or the id cannot be retrieved.
        """
        if not data:
            raise QueryFailure(message="Insert failed", debug_message="Cannot insert empty data")

        quote = self.dialect.quote_identifier
        sql = (
            f"INSERT INTO {quote(table)} ({', '.join(quote(col) for col in data)}) "
            f"VALUES ({self.dialect.placeholders(len(data))})"
        )
        params = list(data.values())

        self._last_insert_id = None
        self.execute(sql, params)

        insert_id = self.last_insert_id()
        if insert_id is None:
            raise QueryFailure(
                message="Insert failed",
                debug_message=(
                    f"Failed to retrieve last insert ID | SQL: {sql} | Params: {params!r}"
                ),
            )
        return insert_id

    def update(self, table: str, data: Dict[str, Any], where: Dict[str, Any]) -> int:
        """
        Update rows matching ``where`` (column -> value).

        :raises QueryFailure: If data or where is empty.
        """
        if not data:
            raise QueryFailure(
                message="Update failed", debug_message="Cannot update with empty data"
            )
        if not where:
            raise QueryFailure(
                message="Update failed",
                debug_message="Cannot update without WHERE conditions (safety check)",
            )

        quote = self.dialect.quote_identifier
        set_clause = ", ".join(f"{quote(col)} = {self.dialect.placeholder}" for col in data)
        where_sql, where_params = self._build_where_clause(where)

        sql = f"UPDATE {quote(table)} SET {set_clause} WHERE {where_sql}"
        return self.execute(sql, [*data.values(), *where_params])

    def delete(self, table: str, where: Dict[str, Any]) -> int:
        """:raises QueryFailure: If where is empty."""
        if not where:
            raise QueryFailure(
                message="Delete failed",
                debug_message="Cannot delete without WHERE conditions (safety check)",
            )

        where_sql, params = self._build_where_clause(where)
        sql = f"DELETE FROM {self.dialect.quote_identifier(table)} WHERE {where_sql}"
        return self.execute(sql, params)

    def find_one(self, table: str, where: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Find a single row.

        :raises QueryFailure: If where is empty.
        """
        if not where:
            raise QueryFailure(
                debug_message="find_one requires at least one WHERE condition"
            )

        where_sql, params = self._build_where_clause(where)
        sql = f"SELECT * FROM {self.dialect.quote_identifier(table)} WHERE {where_sql} LIMIT 1"
        return self.fetch_one(sql, params)

    def find_all(
        self, table: str, where: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Find all rows, optionally filtered by ``where``."""
        sql = f"SELECT * FROM {self.dialect.quote_identifier(table)}"
        params: List[Any] = []
        if where:
            where_sql, params = self._build_where_clause(where)
            sql = f"{sql} WHERE {where_sql}"
        return self.fetch_all(sql, params)

    def update_multiple(
        self, table: str, rows: Sequence[Dict[str, Any]], key_column: str = "id"
    ) -> int:
        """
        Update several rows, each matched by its ``key_column`` value.

        All updates run in one transaction, or in the caller's transaction
        if one is already open.

        :return: Total number of affected rows.
        :raises QueryFailure: If a row lacks the key column.
        """
        if not rows:
            return 0

        for row in rows:
            if row.get(key_column) is None:
                raise QueryFailure(
                    message="Update failed",
                    debug_message=f'Missing key column "{key_column}" in row',
                )

        def apply(db: "SQL") -> int:
            affected = 0
            for row in rows:
                data = {col: value for col, value in row.items() if col != key_column}
                if data:
                    affected += db.update(table, data, {key_column: row[key_column]})
            return affected

        if self._in_transaction:
            return apply(self)
        return self.transaction(apply)

    # ==================== Query Builder ====================

    def table(self, table: str) -> QueryBuilder:
        """Create a query builder for ``table``."""
        return QueryBuilder(self, table)

    # ==================== Helpers ====================

    def _build_where_clause(self, where: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """Build ``col = ? AND ...`` from a mapping; None values become IS NULL."""
        clauses = []
        params: List[Any] = []
        for col, value in where.items():
            quoted = self.dialect.quote_identifier(col)
            if value is None:
                clauses.append(f"{quoted} IS NULL")
            else:
                clauses.append(f"{quoted} = {self.dialect.placeholder}")
                params.append(value)
        return " AND ".join(clauses), params


@dataclass
class ServerSQL(SQL):
    """
    Base class for drivers connecting to a database server.

    Missing values are filled from DB_* environment variables, then from
    a .env file, then from the dialect defaults.

    :param host: Database host.
    :param port: Database port (dialect default if unset).
    :param database: Database name.
    :param username: Database username.
    :param password: Database password.
    :param options: Extra keyword arguments for the driver's connect().
    """

    settings_class: ClassVar[Type[ConnectionSettings]] = ConnectionSettings

    host: Optional[str] = None
    port: Optional[int] = None
    database: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__post_init__()
        settings = self.settings_class.resolve(self._explicit_config())
        self._apply_settings(settings)

        if settings.missing_required():
            raise ConnectionFailure(
                debug_message="Missing required config: host, database, or username"
            )

    def _explicit_config(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "password": self.password,
            "options": self.options or None,
        }

    def _apply_settings(self, settings: ConnectionSettings) -> None:
        self.host = settings.host
        self.port = settings.port
        self.database = settings.database
        self.username = settings.username
        self.password = settings.password
        self.options = dict(settings.options)

    def _connection_failure(self, label: str, error: BaseException) -> ConnectionFailure:
        self.logger.error(f"Failed to connect to {label}", host=self.host, port=self.port)
        return ConnectionFailure(
            debug_message=f"{label} connection to {self.host}:{self.port} failed: {error}",
            code=_error_code(error),
        )
