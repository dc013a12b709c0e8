"""
Fluent query builder.

Supports SELECT, UPDATE, DELETE with WHERE conditions, JOINs, GROUP BY,
HAVING, ORDER BY, LIMIT and OFFSET. INSERT is delegated to the driver.

Parameters are never collected when a builder method is called. They are
gathered while the statement is assembled, walking WHERE conditions first
and HAVING conditions second, so positional placeholders always line up
with the SQL text regardless of call order.
"""

import copy
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple, Union

from ...exceptions import QueryFailure
from ...utils.validation import (
    validate_aggregate_function,
    validate_direction,
    validate_non_negative_int,
    validate_operator,
)
from ..dialects import SqlDialect
from .expressions import (
    BasicCondition,
    BetweenCondition,
    Column,
    Condition,
    InCondition,
    Join,
    NullCondition,
    OrderBy,
    Raw,
)

if TYPE_CHECKING:
    from ..sql import SQL

_MISSING = object()


class QueryBuilder:
    """
    Fluent builder bound to one driver and one table.

    Usage:
        rows = (
            db.table("posts")
            .select(["user_id", raw("COUNT(*) as cnt")])
            .where("status", "published")
            .group_by("user_id")
            .having(raw("COUNT(*)"), ">=", 5)
            .get()
        )
    """

    def __init__(self, db: "SQL", table: str, dialect: Optional[SqlDialect] = None):
        """
        Create a new query builder instance.

        Args:
            db: Driver that executes the assembled statements
            table: Table name (can be schema.table)
            dialect: Dialect override (default: the driver's dialect)
        """
        self.db = db
        self.table = table
        self.dialect = dialect or db.dialect

        self.columns: List[Column] = ["*"]
        self.wheres: List[Condition] = []
        self.joins: List[Join] = []
        self.group_by_columns: List[str] = []
        self.havings: List[BasicCondition] = []
        self.orders: List[OrderBy] = []
        self.limit_value: Optional[int] = None
        self.offset_value: Optional[int] = None
        self.is_distinct = False

    # ==================== SELECT ====================

    def select(self, columns: Union[str, Sequence[Column]] = "*") -> "QueryBuilder":
        """
        Set columns to select.

        Usage:
        - select("*")
        - select("id, name")
        - select(["users.id", "users.name as username"])
        - select([raw("COUNT(*) as total")])

        Strings are always quoted as identifiers; wrap expressions in Raw.
        """
        if columns == "*":
            self.columns = ["*"]
        elif isinstance(columns, str):
            self.columns = [part.strip() for part in columns.split(",")]
        else:
            self.columns = list(columns)
        return self

    def distinct(self) -> "QueryBuilder":
        self.is_distinct = True
        return self

    # ==================== WHERE ====================

    def where(
        self,
        column: Union[str, Dict[str, Any]],
        operator_or_value: Any = _MISSING,
        value: Any = _MISSING,
    ) -> "QueryBuilder":
        """
        Add a WHERE condition.

        Usage:
        - where("id", 5)            -> id = 5
        - where("age", ">", 18)     -> age > 18
        - where({"active": 1})      -> active = 1

        Raises:
            QueryFailure: If called with a column name only, or with an
                operator outside the whitelist
        """
        if isinstance(column, dict):
            for col, val in column.items():
                self.where(col, "=", val)
            return self

        if operator_or_value is _MISSING:
            raise QueryFailure(
                debug_message=(
                    "where() requires at least 2 arguments: "
                    "where(column, value) or where(column, operator, value)"
                )
            )

        if value is _MISSING:
            operator, value = "=", operator_or_value
        else:
            operator = operator_or_value

        self.wheres.append(BasicCondition(column, validate_operator(operator), value))
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._add_in(column, values, negated=False)

    def where_not_in(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._add_in(column, values, negated=True)

    def _add_in(self, column: str, values: Sequence[Any], negated: bool) -> "QueryBuilder":
        values = tuple(values)
        if not values:
            method = "where_not_in" if negated else "where_in"
            raise QueryFailure(debug_message=f"{method} requires a non-empty sequence")
        self.wheres.append(InCondition(column, values, negated))
        return self

    def where_between(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._add_between(column, values, negated=False)

    def where_not_between(self, column: str, values: Sequence[Any]) -> "QueryBuilder":
        return self._add_between(column, values, negated=True)

    def _add_between(self, column: str, values: Sequence[Any], negated: bool) -> "QueryBuilder":
        values = tuple(values)
        if len(values) != 2:
            method = "where_not_between" if negated else "where_between"
            raise QueryFailure(debug_message=f"{method} requires exactly 2 values")
        low, high = values
        self.wheres.append(BetweenCondition(column, low, high, negated))
        return self

    def where_null(self, column: str) -> "QueryBuilder":
        self.wheres.append(NullCondition(column, negated=False))
        return self

    def where_not_null(self, column: str) -> "QueryBuilder":
        self.wheres.append(NullCondition(column, negated=True))
        return self

    def where_like(self, column: str, pattern: str) -> "QueryBuilder":
        """Add a LIKE condition (use % for wildcards)."""
        self.wheres.append(BasicCondition(column, "LIKE", pattern))
        return self

    def where_not_like(self, column: str, pattern: str) -> "QueryBuilder":
        self.wheres.append(BasicCondition(column, "NOT LIKE", pattern))
        return self

    # ==================== JOINS ====================

    def join(self, table: str, first: str, operator: str, second: str) -> "QueryBuilder":
        """Add an INNER JOIN ``table ON first operator second``."""
        return self._add_join("INNER", table, first, operator, second)

    def left_join(self, table: str, first: str, operator: str, second: str) -> "QueryBuilder":
        return self._add_join("LEFT", table, first, operator, second)

    def right_join(self, table: str, first: str, operator: str, second: str) -> "QueryBuilder":
        return self._add_join("RIGHT", table, first, operator, second)

    def _add_join(
        self, kind: str, table: str, first: str, operator: str, second: str
    ) -> "QueryBuilder":
        self.joins.append(Join(kind, table, first, validate_operator(operator), second))
        return self

    # ==================== ORDER BY, LIMIT, OFFSET ====================

    def order_by(self, column: str, direction: str = "ASC") -> "QueryBuilder":
        """Add an ORDER BY column; an unknown direction falls back to ASC."""
        self.orders.append(OrderBy(column, validate_direction(direction)))
        return self

    def limit(self, limit: int) -> "QueryBuilder":
        self.limit_value = validate_non_negative_int(limit, "limit")
        return self

    def offset(self, offset: int) -> "QueryBuilder":
        self.offset_value = validate_non_negative_int(offset, "offset")
        return self

    # ==================== GROUP BY, HAVING ====================

    def group_by(self, columns: Union[str, Sequence[str]]) -> "QueryBuilder":
        """Add GROUP BY column(s); repeated calls accumulate."""
        if isinstance(columns, str):
            columns = [part.strip() for part in columns.split(",")]
        self.group_by_columns.extend(columns)
        return self

    def having(self, column: Column, operator: str, value: Any) -> "QueryBuilder":
        """
        Add a HAVING condition.

        Args:
            column: Column name, or Raw for aggregates (raw("COUNT(*)"))
            operator: Comparison operator
            value: Value to compare
        """
        self.havings.append(BasicCondition(column, validate_operator(operator), value))
        return self

    # ==================== EXECUTE ====================

    def get(self) -> List[Dict[str, Any]]:
        """Execute the query and return all rows as dicts."""
        sql, params = self.to_sql()
        return self.db.fetch_all(sql, params)

    def first(self) -> Optional[Dict[str, Any]]:
        """Return the first row or None; leaves this builder untouched."""
        results = self.clone().limit(1).get()
        return results[0] if results else None

    def exists(self) -> bool:
        return self.count() > 0

    def count(self, column: str = "*") -> int:
        result = self.aggregate("COUNT", column)
        return int(result) if result is not None else 0

    def sum(self, column: str) -> Optional[float]:
        return _to_float(self.aggregate("SUM", column))

    def avg(self, column: str) -> Optional[float]:
        return _to_float(self.aggregate("AVG", column))

    def min(self, column: str) -> Any:
        return self.aggregate("MIN", column)

    def max(self, column: str) -> Any:
        return self.aggregate("MAX", column)

    def aggregate(self, function: str, column: str = "*") -> Any:
        """
        Execute an aggregate function over the current conditions.

        The projection is swapped for ``FN(column) as aggregate`` and
        LIMIT, OFFSET and ORDER BY are suppressed for the duration of the
        query; the builder state is restored afterwards.

        Args:
            function: COUNT, SUM, AVG, MIN or MAX
            column: Column to aggregate (default: *)

        Returns:
            The aggregate value, or None if there is none
        """
        function = validate_aggregate_function(function)
        saved = (self.columns, self.limit_value, self.offset_value, self.orders)

        target = "*" if column == "*" else self.dialect.quote_identifier(column)
        self.columns = [Raw(f"{function}({target}) as aggregate")]
        self.limit_value = None
        self.offset_value = None
        self.orders = []

        try:
            sql, params = self.to_sql()
            row = self.db.fetch_one(sql, params)
        finally:
            self.columns, self.limit_value, self.offset_value, self.orders = saved

        if row is None:
            return None
        return row.get("aggregate")

    # ==================== INSERT, UPDATE, DELETE ====================

    def insert(self, data: Dict[str, Any]) -> Any:
        """Insert a row into the builder's table and return its id."""
        return self.db.insert(self.table, data)

    def update(self, data: Dict[str, Any]) -> int:
        """
        Update rows matching the WHERE conditions.

        Raises:
            QueryFailure: If no WHERE condition is set or data is empty
        """
        if not self.wheres:
            raise QueryFailure(
                message="Update failed",
                debug_message=(
                    "Cannot update without WHERE conditions (safety check). "
                    "Use execute() if you really want to update all rows."
                ),
            )
        if not data:
            raise QueryFailure(
                message="Update failed", debug_message="Cannot update with empty data"
            )

        set_clauses = [
            f"{self.dialect.quote_identifier(col)} = {self.dialect.placeholder}" for col in data
        ]
        where_sql, where_params = self._compile_conditions(self.wheres)

        sql = (
            f"UPDATE {self.dialect.quote_identifier(self.table)} "
            f"SET {', '.join(set_clauses)} WHERE {where_sql}"
        )
        return self.db.execute(sql, [*data.values(), *where_params])

    def delete(self) -> int:
        """
        Delete rows matching the WHERE conditions.

        Raises:
            QueryFailure: If no WHERE condition is set
        """
        if not self.wheres:
            raise QueryFailure(
                message="Delete failed",
                debug_message=(
                    "Cannot delete without WHERE conditions (safety check). "
                    "Use execute() if you really want to delete all rows."
                ),
            )

        where_sql, where_params = self._compile_conditions(self.wheres)
        sql = f"DELETE FROM {self.dialect.quote_identifier(self.table)} WHERE {where_sql}"
        return self.db.execute(sql, where_params)

    # ==================== ASSEMBLY ====================

    def to_sql(self) -> Tuple[str, List[Any]]:
        """
        Assemble the SELECT statement without executing it.

        Returns:
            Tuple of (sql, params); params are WHERE values then HAVING values
        """
        quote = self.dialect.quote_identifier
        params: List[Any] = []

        parts = ["SELECT DISTINCT" if self.is_distinct else "SELECT"]
        parts.append(", ".join(self._compile_column(col) for col in self.columns))
        parts.append(f"FROM {quote(self.table)}")

        for join in self.joins:
            parts.append(
                f"{join.kind} JOIN {quote(join.table)} "
                f"ON {quote(join.first)} {join.operator} {quote(join.second)}"
            )

        if self.wheres:
            where_sql, where_params = self._compile_conditions(self.wheres)
            parts.append(f"WHERE {where_sql}")
            params.extend(where_params)

        if self.group_by_columns:
            parts.append(f"GROUP BY {', '.join(quote(col) for col in self.group_by_columns)}")

        if self.havings:
            having_sql, having_params = self._compile_conditions(self.havings)
            parts.append(f"HAVING {having_sql}")
            params.extend(having_params)

        if self.orders:
            order_sql = ", ".join(f"{quote(order.column)} {order.direction}" for order in self.orders)
            parts.append(f"ORDER BY {order_sql}")

        if self.limit_value is not None:
            parts.append(f"LIMIT {int(self.limit_value)}")

        if self.offset_value is not None:
            parts.append(f"OFFSET {int(self.offset_value)}")

        return " ".join(parts), params

    def _compile_column(self, column: Column) -> str:
        # Only Raw bypasses quoting
        if isinstance(column, Raw):
            return column.value
        if column == "*":
            return "*"
        return self.dialect.quote_identifier(column)

    def _compile_conditions(self, conditions: Sequence[Condition]) -> Tuple[str, List[Any]]:
        """Turn descriptors into ``a AND b ...`` plus their params, in list order."""
        clauses = []
        params: List[Any] = []
        placeholder = self.dialect.placeholder

        for condition in conditions:
            column = self._compile_column(condition.column)

            if isinstance(condition, BasicCondition):
                clauses.append(f"{column} {condition.operator} {placeholder}")
                params.append(condition.value)
            elif isinstance(condition, InCondition):
                keyword = "NOT IN" if condition.negated else "IN"
                clauses.append(
                    f"{column} {keyword} ({self.dialect.placeholders(len(condition.values))})"
                )
                params.extend(condition.values)
            elif isinstance(condition, BetweenCondition):
                keyword = "NOT BETWEEN" if condition.negated else "BETWEEN"
                clauses.append(f"{column} {keyword} {placeholder} AND {placeholder}")
                params.extend([condition.low, condition.high])
            elif isinstance(condition, NullCondition):
                keyword = "IS NOT NULL" if condition.negated else "IS NULL"
                clauses.append(f"{column} {keyword}")
            else:
                raise TypeError(f"Unsupported condition: {condition!r}")

        return " AND ".join(clauses), params

    def clone(self) -> "QueryBuilder":
        """Copy the builder; list state is copied, the driver is shared."""
        cloned = copy.copy(self)
        cloned.columns = list(self.columns)
        cloned.wheres = list(self.wheres)
        cloned.joins = list(self.joins)
        cloned.group_by_columns = list(self.group_by_columns)
        cloned.havings = list(self.havings)
        cloned.orders = list(self.orders)
        return cloned

    def __repr__(self) -> str:
        return f"QueryBuilder(table={self.table!r}, dialect={self.dialect!r})"


def _to_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
