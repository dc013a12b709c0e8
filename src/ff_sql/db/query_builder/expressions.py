"""
Value types held by the query builder.

Conditions are recorded as descriptors and only turned into SQL text when
the statement is assembled, which keeps parameter order tied to clause
order rather than call order.
"""

from dataclasses import dataclass
from typing import Any, Tuple, Union


@dataclass(frozen=True)
class Raw:
    """
    A raw SQL expression that is never quoted.

    Use for aggregates and other expressions in select lists and HAVING.
    Never build one from untrusted input: it bypasses identifier quoting.

    Example:
        db.table("orders").select(["user_id", raw("SUM(amount) as revenue")])
    """

    value: str

    def __str__(self) -> str:
        return self.value


Column = Union[str, Raw]


@dataclass(frozen=True)
class BasicCondition:
    """``column operator ?``"""

    column: Column
    operator: str
    value: Any


@dataclass(frozen=True)
class InCondition:
    """``column [NOT] IN (?, ...)``"""

    column: str
    values: Tuple[Any, ...]
    negated: bool = False


@dataclass(frozen=True)
class BetweenCondition:
    """``column [NOT] BETWEEN ? AND ?``"""

    column: str
    low: Any
    high: Any
    negated: bool = False


@dataclass(frozen=True)
class NullCondition:
    """``column IS [NOT] NULL``"""

    column: str
    negated: bool = False


Condition = Union[BasicCondition, InCondition, BetweenCondition, NullCondition]


@dataclass(frozen=True)
class Join:
    kind: str
    table: str
    first: str
    operator: str
    second: str


@dataclass(frozen=True)
class OrderBy:
    column: str
    direction: str = "ASC"
