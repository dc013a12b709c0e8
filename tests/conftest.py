"""
Shared pytest fixtures.

Every test runs in an empty working directory with the DB_* environment
cleared, so neither a developer's shell nor a stray .env file leaks into
the configuration tests.
"""

import pytest

from ff_sql import NullLogger, SQLite

DB_ENV_VARS = (
    "DB_HOST",
    "DB_PORT",
    "DB_DATABASE",
    "DB_USERNAME",
    "DB_PASSWORD",
    "DB_CHARSET",
    "DB_OPTIONS",
    "DB_SQLITE_PATH",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Clear DB_* variables and run inside a temporary directory."""
    for name in DB_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    yield tmp_path


@pytest.fixture
def db():
    """In-memory SQLite driver with a users table and a posts table."""
    database = SQLite(path=":memory:", logger=NullLogger("test"))
    database.execute(
        "CREATE TABLE users ("
        "id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT, age INTEGER, "
        "active INTEGER DEFAULT 1, deleted_at TEXT)"
    )
    database.execute(
        "CREATE TABLE posts ("
        "id INTEGER PRIMARY KEY, user_id INTEGER REFERENCES users(id), "
        "title TEXT, status TEXT, views INTEGER DEFAULT 0)"
    )
    yield database
    database.close_connection()


@pytest.fixture
def seeded_db(db):
    """Driver with three users and four posts."""
    db.insert("users", {"name": "Alice", "email": "alice@example.com", "age": 30})
    db.insert("users", {"name": "Bob", "email": "bob@example.com", "age": 25})
    db.insert("users", {"name": "Charlie", "email": None, "age": 35, "active": 0})

    db.insert("posts", {"user_id": 1, "title": "First", "status": "published", "views": 10})
    db.insert("posts", {"user_id": 1, "title": "Second", "status": "published", "views": 20})
    db.insert("posts", {"user_id": 1, "title": "Draft", "status": "draft", "views": 0})
    db.insert("posts", {"user_id": 2, "title": "Hello", "status": "published", "views": 5})
    return db
