"""
Fixtures for tests against real PostgreSQL and MySQL servers.

Connection values come from DB_HOST, DB_DATABASE, DB_USERNAME and
DB_PASSWORD, read when this module is imported (the unit-test fixtures
clear DB_* afterwards). TEST_POSTGRES_PORT and TEST_MYSQL_PORT override
the default ports. Tests skip when a server is unreachable.
"""

import os

import pytest

import ff_sql
from ff_sql import ConnectionFailure, NullLogger

SERVER_CONFIG = {
    "host": os.environ.get("DB_HOST", "localhost"),
    "database": os.environ.get("DB_DATABASE", "ff_sql_test"),
    "username": os.environ.get("DB_USERNAME"),
    "password": os.environ.get("DB_PASSWORD"),
}

PORTS = {
    "postgres": int(os.environ.get("TEST_POSTGRES_PORT", "5432")),
    "mysql": int(os.environ.get("TEST_MYSQL_PORT", "3306")),
}

DEFAULT_USERS = {"postgres": "postgres", "mysql": "root"}

SCHEMAS = {
    "postgres": [
        "CREATE TABLE ff_users ("
        "id SERIAL PRIMARY KEY, name VARCHAR(100) NOT NULL, email VARCHAR(255), "
        '"order" INTEGER, active BOOLEAN DEFAULT TRUE)',
    ],
    "mysql": [
        "CREATE TABLE ff_users ("
        "id INT AUTO_INCREMENT PRIMARY KEY, name VARCHAR(100) NOT NULL, "
        "email VARCHAR(255), `order` INT, active BOOLEAN DEFAULT TRUE) ENGINE=InnoDB",
    ],
}


def _connect(kind):
    config = dict(SERVER_CONFIG, port=PORTS[kind])
    config["username"] = config["username"] or DEFAULT_USERS[kind]
    factory = ff_sql.postgres if kind == "postgres" else ff_sql.mysql
    try:
        return factory(config, logger=NullLogger("integration"))
    except ConnectionFailure as e:
        pytest.skip(f"{kind} server unavailable: {e.debug_message}")


@pytest.fixture(params=["postgres", "mysql"])
def server_db(request):
    """Connected driver with an empty ff_users table."""
    db = _connect(request.param)
    db.execute("DROP TABLE IF EXISTS ff_users")
    for statement in SCHEMAS[request.param]:
        db.execute(statement)
    yield db
    if db.in_transaction:
        db.rollback()
    db.execute("DROP TABLE IF EXISTS ff_users")
    db.close_connection()
