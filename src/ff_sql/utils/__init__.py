"""
ff-sql utility modules.
"""

from .validation import (
    AGGREGATE_FUNCTIONS,
    ALLOWED_DIRECTIONS,
    ALLOWED_OPERATORS,
    validate_aggregate_function,
    validate_direction,
    validate_non_negative_int,
    validate_operator,
)

__all__ = [
    "AGGREGATE_FUNCTIONS",
    "ALLOWED_DIRECTIONS",
    "ALLOWED_OPERATORS",
    "validate_aggregate_function",
    "validate_direction",
    "validate_non_negative_int",
    "validate_operator",
]
