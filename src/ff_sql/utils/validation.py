"""
Validation of the SQL tokens that cannot be parameter-bound.

Operators, sort directions and LIMIT/OFFSET values are embedded literally
into SQL text, so each one is checked here first.
"""

from typing import Any

from ..exceptions import QueryFailure

ALLOWED_OPERATORS = (
    "=",
    "!=",
    "<>",
    "<",
    ">",
    "<=",
    ">=",
    "LIKE",
    "NOT LIKE",
    "IS",
    "IS NOT",
)

ALLOWED_DIRECTIONS = ("ASC", "DESC")

AGGREGATE_FUNCTIONS = ("COUNT", "SUM", "AVG", "MIN", "MAX")


def validate_operator(operator: Any) -> str:
    """
    Validate that an operator is in the allowed whitelist.

    Args:
        operator: Operator token, e.g. ">=" or "not like"

    Returns:
        The trimmed, uppercased operator

    Raises:
        QueryFailure: If the operator is not allowed
    """
    normalized = " ".join(str(operator).split()).upper()

    if normalized not in ALLOWED_OPERATORS:
        raise QueryFailure(
            debug_message=(
                f'Invalid operator "{operator}". Allowed: {", ".join(ALLOWED_OPERATORS)}'
            )
        )

    return normalized


def validate_direction(direction: str) -> str:
    """Normalize an ORDER BY direction; anything but DESC means ASC."""
    normalized = str(direction).strip().upper()
    if normalized not in ALLOWED_DIRECTIONS:
        return "ASC"
    return normalized


def validate_non_negative_int(value: Any, name: str) -> int:
    """
    Validate a LIMIT or OFFSET value.

    Raises:
        QueryFailure: If the value is not a non-negative int
    """
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise QueryFailure(debug_message=f"{name} must be a non-negative integer, got {value!r}")
    return value


def validate_aggregate_function(function: str) -> str:
    normalized = function.strip().upper()
    if normalized not in AGGREGATE_FUNCTIONS:
        raise QueryFailure(
            debug_message=(
                f'Invalid aggregate function "{function}". '
                f'Allowed: {", ".join(AGGREGATE_FUNCTIONS)}'
            )
        )
    return normalized
