"""
SQL dialect abstraction for multi-backend support.

A dialect is the capability the generic driver and query builder are
parameterized with. It handles database-specific behaviors:
- Identifier quoting (double quotes vs backticks)
- Placeholder style (? vs %s)
"""

import re
from abc import ABC, abstractmethod

_ALIAS_PATTERN = re.compile(r"^(.+)\s+as\s+(\w+)$", re.IGNORECASE)


class SqlDialect(ABC):
    """Abstract base class for SQL dialects."""

    name: str = ""

    @property
    @abstractmethod
    def quote_char(self) -> str:
        """Character used to quote identifiers."""

    @abstractmethod
    def get_param_style(self) -> str:
        """
        Return the DB-API parameter style.

        Returns:
            'qmark': ? (sqlite3)
            'format': %s (psycopg2, mysql.connector)
        """

    @property
    def placeholder(self) -> str:
        """Positional placeholder for one bound value."""
        return "?" if self.get_param_style() == "qmark" else "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join([self.placeholder] * count)

    def quote_identifier(self, identifier: str) -> str:
        """
        Quote an identifier (table/column name).

        Handles:
        - Simple: users -> "users"
        - Dotted: public.users -> "public"."users"
        - Alias: users.name as author -> "users"."name" as author
        - Wildcard: * and users.* keep the * unquoted

        Embedded quote characters are doubled. Nothing else is passed
        through unquoted: SQL expressions must be wrapped in Raw.

        Args:
            identifier: Identifier to quote

        Returns:
            Quoted identifier
        """
        match = _ALIAS_PATTERN.match(identifier)
        if match:
            return f"{self.quote_identifier(match.group(1).strip())} as {match.group(2)}"

        if "." in identifier:
            return ".".join(self._quote_segment(part) for part in identifier.split("."))

        return self._quote_segment(identifier)

    def _quote_segment(self, segment: str) -> str:
        if segment == "*":
            return segment
        escaped = segment.replace(self.quote_char, self.quote_char * 2)
        return f"{self.quote_char}{escaped}{self.quote_char}"

    def unquote_identifier(self, quoted: str) -> str:
        """Reverse ``_quote_segment`` for a single quoted segment."""
        quote = self.quote_char
        if len(quoted) >= 2 and quoted.startswith(quote) and quoted.endswith(quote):
            return quoted[1:-1].replace(quote * 2, quote)
        return quoted

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PostgresDialect(SqlDialect):
    """PostgreSQL via psycopg2: double quotes, %s placeholders."""

    name = "postgres"

    @property
    def quote_char(self) -> str:
        return '"'

    def get_param_style(self) -> str:
        return "format"


class MySQLDialect(SqlDialect):
    """MySQL via mysql.connector: backticks, %s placeholders."""

    name = "mysql"

    @property
    def quote_char(self) -> str:
        return "`"

    def get_param_style(self) -> str:
        return "format"


class SQLiteDialect(SqlDialect):
    """SQLite via sqlite3: double quotes, ? placeholders."""

    name = "sqlite"

    @property
    def quote_char(self) -> str:
        return '"'

    def get_param_style(self) -> str:
        return "qmark"
