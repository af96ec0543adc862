"""Tests for the vote ledger."""

import pytest
from sqlalchemy.dialects import mysql
from sqlalchemy.exc import OperationalError

from newsboard.core.errors import StorageError
from newsboard.services.votes import VoteLedger, upsert_statement


@pytest.fixture
async def setup(add_user, add_entry):
    alice = await add_user("alice")
    bob = await add_user("bob")
    entry = await add_entry(alice, "first")
    return alice, bob, entry


async def test_no_votes_counts_zero(db, setup):
    _, _, entry = setup
    ledger = VoteLedger(db)
    assert await ledger.vote_count(entry.id) == 0
    assert await ledger.vote_count(999) == 0


async def test_cast_vote_is_idempotent(db, setup):
    _, bob, entry = setup
    ledger = VoteLedger(db)

    assert await ledger.cast_vote(entry.id, bob.id) == 1
    assert await ledger.cast_vote(entry.id, bob.id) == 1
    assert await ledger.vote_count(entry.id) == 1
    assert await ledger.has_voted(entry.id, bob.id)


async def test_votes_from_different_users_add_up(db, setup):
    alice, bob, entry = setup
    ledger = VoteLedger(db)

    await ledger.cast_vote(entry.id, alice.id)
    assert await ledger.cast_vote(entry.id, bob.id) == 2


async def test_retract_restores_previous_count(db, setup):
    alice, bob, entry = setup
    ledger = VoteLedger(db)
    await ledger.cast_vote(entry.id, alice.id)

    before = await ledger.vote_count(entry.id)
    await ledger.cast_vote(entry.id, bob.id)
    assert await ledger.retract_vote(entry.id, bob.id) == before
    assert not await ledger.has_voted(entry.id, bob.id)
    assert await ledger.has_voted(entry.id, alice.id)


async def test_retracting_missing_vote_is_noop(db, setup):
    _, bob, entry = setup
    ledger = VoteLedger(db)
    assert await ledger.retract_vote(entry.id, bob.id) == 0
    assert await ledger.retract_vote(entry.id, bob.id) == 0


async def test_batch_counts_and_voted(db, setup, add_entry):
    alice, bob, entry = setup
    other = await add_entry(alice, "second")
    ledger = VoteLedger(db)
    await ledger.cast_vote(entry.id, alice.id)
    await ledger.cast_vote(entry.id, bob.id)
    await ledger.cast_vote(other.id, alice.id)

    assert await ledger.counts([entry.id, other.id, 12345]) == {entry.id: 2, other.id: 1, 12345: 0}
    assert await ledger.voted([entry.id, other.id], bob.id) == {entry.id}
    assert await ledger.counts([]) == {}
    assert await ledger.voted([], bob.id) == set()


async def test_storage_failure_is_reported(db, setup, monkeypatch):
    _, bob, entry = setup
    ledger = VoteLedger(db)

    async def broken(*args, **kwargs):
        raise OperationalError("INSERT INTO votes", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "execute", broken)
    with pytest.raises(StorageError) as exc:
        await ledger.cast_vote(entry.id, bob.id)
    assert exc.value.operation == "cast_vote"

    monkeypatch.undo()
    assert await ledger.vote_count(entry.id) == 0


def test_mysql_upsert_keeps_existing_row():
    sql = str(upsert_statement("mysql", 1, 2).compile(dialect=mysql.dialect()))
    assert "ON DUPLICATE KEY UPDATE" in sql


async def test_unsupported_dialect_is_a_storage_error(db, setup, monkeypatch):
    _, bob, entry = setup
    assert upsert_statement("oracle", entry.id, bob.id) is None

    ledger = VoteLedger(db)
    monkeypatch.setattr(db.bind.dialect, "name", "oracle")
    with pytest.raises(StorageError) as exc:
        await ledger.cast_vote(entry.id, bob.id)
    assert exc.value.operation == "cast_vote"

    monkeypatch.undo()
    assert await ledger.vote_count(entry.id) == 0
