"""
Query builder module for dialect-aware SQL generation.

Provides the fluent QueryBuilder and the value types it records.
"""

from .base import QueryBuilder
from .expressions import (
    BasicCondition,
    BetweenCondition,
    InCondition,
    Join,
    NullCondition,
    OrderBy,
    Raw,
)

__all__ = [
    "QueryBuilder",
    "Raw",
    "BasicCondition",
    "InCondition",
    "BetweenCondition",
    "NullCondition",
    "Join",
    "OrderBy",
]
