"""
Unit tests for transaction control on in-memory SQLite.
"""

import sqlite3
from unittest.mock import Mock

import pytest

from ff_sql import QueryFailure, TransactionFailure


def _raise_operational_error():
    raise sqlite3.OperationalError("disk I/O error")


class TestExplicitTransactions:
    def test_commit_persists_changes(self, seeded_db):
        seeded_db.begin_transaction()
        assert seeded_db.in_transaction

        seeded_db.insert("users", {"name": "Dana"})
        seeded_db.commit()

        assert not seeded_db.in_transaction
        assert seeded_db.table("users").count() == 4

    def test_rollback_discards_changes(self, seeded_db):
        seeded_db.begin_transaction()
        seeded_db.insert("users", {"name": "Dana"})
        seeded_db.delete("posts", {"user_id": 1})
        seeded_db.rollback()

        assert not seeded_db.in_transaction
        assert seeded_db.table("users").count() == 3
        assert seeded_db.table("posts").count() == 4

    def test_begin_twice_raises(self, db):
        db.begin_transaction()

        with pytest.raises(TransactionFailure) as exc_info:
            db.begin_transaction()

        assert exc_info.value.message == "Failed to begin transaction"
        assert exc_info.value.debug_message == "There is already an active transaction"
        assert db.in_transaction

    @pytest.mark.parametrize("action", ["commit", "rollback"])
    def test_commit_or_rollback_without_transaction_raises(self, db, action):
        with pytest.raises(TransactionFailure) as exc_info:
            getattr(db, action)()

        assert exc_info.value.message == f"Failed to {action} transaction"
        assert exc_info.value.debug_message == "There is no active transaction"

    def test_driver_error_during_commit_is_wrapped(self, db, monkeypatch):
        db.begin_transaction()
        monkeypatch.setattr(db, "_commit", _raise_operational_error)

        with pytest.raises(TransactionFailure) as exc_info:
            db.commit()

        assert exc_info.value.debug_message == "disk I/O error"
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)
        assert db.in_transaction


class TestTransactionCallback:
    def test_returns_callback_result_and_commits(self, seeded_db):
        new_id = seeded_db.transaction(lambda db: db.insert("users", {"name": "Dana"}))

        assert new_id == 4
        assert not seeded_db.in_transaction
        assert seeded_db.find_one("users", {"id": 4})["name"] == "Dana"

    def test_exception_rolls_back_and_propagates(self, seeded_db):
        def work(db):
            db.insert("users", {"name": "Dana"})
            raise ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            seeded_db.transaction(work)

        assert not seeded_db.in_transaction
        assert seeded_db.table("users").count() == 3

    def test_query_failure_inside_callback_propagates(self, seeded_db):
        def work(db):
            db.update("users", {"age": 99}, {"id": 1})
            db.execute("INSERT INTO missing VALUES (1)")

        with pytest.raises(QueryFailure):
            seeded_db.transaction(work)

        assert seeded_db.find_one("users", {"id": 1})["age"] == 30

    def test_rollback_failure_keeps_original_exception(self, seeded_db, monkeypatch):
        seeded_db.logger = Mock()
        monkeypatch.setattr(seeded_db, "_rollback", _raise_operational_error)

        def work(db):
            raise ValueError("original")

        with pytest.raises(ValueError, match="original"):
            seeded_db.transaction(work)

        seeded_db.logger.warning.assert_called_once()
        args, kwargs = seeded_db.logger.warning.call_args
        assert args == ("Rollback failed after transaction error",)
        assert kwargs["error"] == "original"
        assert kwargs["rollback_error"] == "disk I/O error"
        assert not seeded_db.in_transaction

    def test_commit_failure_triggers_rollback(self, seeded_db, monkeypatch):
        events = []
        seeded_db.on("transaction.rollback", lambda payload: events.append("rollback"))
        monkeypatch.setattr(seeded_db, "_commit", _raise_operational_error)

        with pytest.raises(TransactionFailure):
            seeded_db.transaction(lambda db: db.insert("users", {"name": "Dana"}))

        assert events == ["rollback"]
        assert seeded_db.table("users").count() == 3


class TestUpdateMultipleTransactions:
    def test_opens_its_own_transaction(self, seeded_db):
        events = []
        for event in ("transaction.begin", "transaction.commit"):
            seeded_db.on(event, lambda payload, event=event: events.append(event))

        seeded_db.update_multiple("users", [{"id": 1, "age": 1}, {"id": 2, "age": 2}])

        assert events == ["transaction.begin", "transaction.commit"]

    def test_joins_the_callers_transaction(self, seeded_db):
        begins = []
        seeded_db.on("transaction.begin", lambda payload: begins.append(payload))

        seeded_db.transaction(
            lambda db: db.update_multiple("users", [{"id": 1, "age": 1}, {"id": 2, "age": 2}])
        )

        assert len(begins) == 1
        assert seeded_db.find_one("users", {"id": 2})["age"] == 2

    def test_outer_rollback_undoes_joined_updates(self, seeded_db):
        seeded_db.begin_transaction()
        seeded_db.update_multiple("users", [{"id": 1, "age": 1}])
        assert seeded_db.in_transaction

        seeded_db.rollback()

        assert seeded_db.find_one("users", {"id": 1})["age"] == 30
