"""
Custom exceptions for the ff-sql package.

Every exception carries a short, user-facing message plus an optional
``debug_message`` with driver text, SQL and parameters. Log the debug
message, never show it to end users.
"""

from typing import Optional, Union


class FFSQLError(Exception):
    """Base exception for all ff-sql errors."""

    default_message = "Database error"

    def __init__(
        self,
        message: Optional[str] = None,
        debug_message: Optional[str] = None,
        code: Union[int, str] = 0,
    ):
        self.message = message or self.default_message
        self.debug_message = debug_message
        self.code = code
        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(message={self.message!r}, "
            f"debug_message={self.debug_message!r}, code={self.code!r})"
        )


class ConnectionFailure(FFSQLError):
    """Raised when configuration is missing or the connection cannot be opened."""

    default_message = "Database connection failed"


class QueryFailure(FFSQLError):
    """Raised when a query fails or is rejected before execution."""

    default_message = "Query failed"


class TransactionFailure(FFSQLError):
    """Raised when begin, commit or rollback fails."""

    default_message = "Transaction failed"
