from __future__ import annotations

from typing import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.core.errors import StorageError
from newsboard.core.logging import log
from newsboard.models import Vote

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def upsert_statement(dialect: str, entry_id: int, user_id: int):
    """An insert that leaves an existing (entry, user) row alone, or None if the dialect has none."""
    if dialect in ("mysql", "mariadb"):
        stmt = mysql_insert(Vote).values(entry_id=entry_id, user_id=user_id)
        return stmt.on_duplicate_key_update(entry_id=stmt.inserted.entry_id)
    insert = _INSERTS.get(dialect)
    if insert is None:
        return None
    # Concurrent voters on the same key all converge on a single row.
    return insert(Vote).values(entry_id=entry_id, user_id=user_id).on_conflict_do_nothing(
        index_elements=[Vote.entry_id, Vote.user_id]
    )


class VoteLedger:
    """Who voted on what. One row per (entry, user); membership is the only payload."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _fail(self, op: str, err: SQLAlchemyError) -> StorageError:
        log.error("{op}: database error ({err})", op=op, err=err)
        await self.db.rollback()
        return StorageError(op, err)

    async def cast_vote(self, entry_id: int, user_id: int) -> int:
        dialect = self.db.bind.dialect.name
        stmt = upsert_statement(dialect, entry_id, user_id)
        if stmt is None:
            log.error("cast_vote: no vote upsert for dialect {d}", d=dialect)
            raise StorageError("cast_vote", NotImplementedError(dialect))
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("cast_vote", e) from e
        return await self.vote_count(entry_id)

    async def retract_vote(self, entry_id: int, user_id: int) -> int:
        try:
            await self.db.execute(delete(Vote).where(Vote.entry_id == entry_id, Vote.user_id == user_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("retract_vote", e) from e
        return await self.vote_count(entry_id)

    async def vote_count(self, entry_id: int) -> int:
        try:
            res = await self.db.execute(select(func.count()).select_from(Vote).where(Vote.entry_id == entry_id))
        except SQLAlchemyError as e:
            raise await self._fail("vote_count", e) from e
        return int(res.scalar_one())

    async def has_voted(self, entry_id: int, user_id: int) -> bool:
        try:
            res = await self.db.execute(select(Vote.entry_id).where(Vote.entry_id == entry_id, Vote.user_id == user_id))
        except SQLAlchemyError as e:
            raise await self._fail("has_voted", e) from e
        return res.scalar_one_or_none() is not None

    async def counts(self, entry_ids: Iterable[int]) -> dict[int, int]:
        ids = list(entry_ids)
        if not ids:
            return {}
        try:
            res = await self.db.execute(
                select(Vote.entry_id, func.count()).where(Vote.entry_id.in_(ids)).group_by(Vote.entry_id)
            )
        except SQLAlchemyError as e:
            raise await self._fail("vote_counts", e) from e
        found = {eid: int(n) for eid, n in res.all()}
        return {eid: found.get(eid, 0) for eid in ids}

    async def voted(self, entry_ids: Iterable[int], user_id: int) -> set[int]:
        ids = list(entry_ids)
        if not ids:
            return set()
        try:
            res = await self.db.execute(select(Vote.entry_id).where(Vote.user_id == user_id, Vote.entry_id.in_(ids)))
        except SQLAlchemyError as e:
            raise await self._fail("voted", e) from e
        return set(res.scalars().all())
