"""
Unit tests for dialect identifier quoting.
"""

import pytest

from ff_sql import MySQLDialect, PostgresDialect, SQLiteDialect

DIALECTS = [PostgresDialect(), SQLiteDialect(), MySQLDialect()]


def test_quote_identifier_simple():
    """Test simple names, including SQL reserved keywords."""
    pg = PostgresDialect()
    assert pg.quote_identifier("users") == '"users"'
    assert pg.quote_identifier("order") == '"order"'
    assert pg.quote_identifier("limit") == '"limit"'
    assert MySQLDialect().quote_identifier("users") == "`users`"


def test_quote_identifier_schema_qualified():
    """Test schema.table and table.column are quoted per segment."""
    assert PostgresDialect().quote_identifier("public.users") == '"public"."users"'
    assert SQLiteDialect().quote_identifier("users.id") == '"users"."id"'
    assert MySQLDialect().quote_identifier("mydb.users") == "`mydb`.`users`"


def test_quote_identifier_alias():
    """Test `expr as alias` keeps the alias unquoted."""
    pg = PostgresDialect()
    assert pg.quote_identifier("name as username") == '"name" as username'
    assert pg.quote_identifier("users.name AS author") == '"users"."name" as author'
    assert MySQLDialect().quote_identifier("users.name as author") == "`users`.`name` as author"


def test_quote_identifier_wildcard():
    """Test * stays unquoted, alone or as the last segment."""
    pg = PostgresDialect()
    assert pg.quote_identifier("*") == "*"
    assert pg.quote_identifier("users.*") == '"users".*'


def test_quote_identifier_escapes_quote_character():
    """Test embedded quote characters are doubled."""
    assert PostgresDialect().quote_identifier('my"column') == '"my""column"'
    assert MySQLDialect().quote_identifier("my`column") == "`my``column`"
    # The other dialect's quote character is just a normal character
    assert MySQLDialect().quote_identifier('my"column') == '`my"column`'


def test_quote_identifier_does_not_pass_through_expressions():
    """Test strings with parentheses are quoted; only Raw bypasses quoting."""
    pg = PostgresDialect()
    assert pg.quote_identifier("COUNT(*)") == '"COUNT(*)"'
    assert pg.quote_identifier("COUNT(*) as total") == '"COUNT(*)" as total'


def test_quote_identifier_injection_attempt_stays_inside_quotes():
    """Test an injection attempt ends up as a single quoted identifier."""
    quoted = SQLiteDialect().quote_identifier('name"; DROP TABLE users; --')
    assert quoted == '"name""; DROP TABLE users; --"'


@pytest.mark.parametrize("dialect", DIALECTS, ids=lambda d: d.name)
@pytest.mark.parametrize(
    "identifier",
    ["users", "order", "my table", "ix-ds", 'my"column', "my`column", '""', "``", "年金计划号"],
)
def test_quote_identifier_round_trip(dialect, identifier):
    """Test quoting then unquoting recovers the original identifier."""
    quoted = dialect.quote_identifier(identifier)

    assert quoted.startswith(dialect.quote_char)
    assert quoted.endswith(dialect.quote_char)
    assert dialect.unquote_identifier(quoted) == identifier


def test_placeholders():
    """Test each dialect's placeholder style."""
    assert SQLiteDialect().placeholder == "?"
    assert PostgresDialect().placeholder == "%s"
    assert MySQLDialect().placeholder == "%s"
    assert SQLiteDialect().placeholders(3) == "?, ?, ?"
    assert PostgresDialect().get_param_style() == "format"
    assert SQLiteDialect().get_param_style() == "qmark"
