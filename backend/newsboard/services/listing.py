from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from newsboard.core.errors import StorageError
from newsboard.core.logging import log
from newsboard.models import Entry, EntryKind, User
from newsboard.services.scoring import as_utc, entry_score
from newsboard.services.votes import VoteLedger

DEFAULT_PAGE_SIZE = 30


@dataclass
class ListingRow:
    entry: Entry
    author: str | None
    votes: int
    ncomments: int = 0
    selfvote: bool = False

    @property
    def created_at(self) -> datetime:
        return as_utc(self.entry.created_at)


@dataclass
class RankedRow:
    row: ListingRow
    score: float | None


@dataclass
class Page:
    items: list[RankedRow] = field(default_factory=list)
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE
    has_more: bool = False


def rank(
    rows: Sequence[ListingRow],
    now: datetime,
    gravity: float,
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
    latest: bool = False,
) -> Page:
    """Order rows by points (or newest first when ``latest``) and cut one page.

    Equal points fall back to newest first. ``has_more`` only says the page came
    back full; no total count is taken.
    """
    offset = max(0, offset)
    if limit <= 0:
        limit = DEFAULT_PAGE_SIZE

    if latest:
        ranked = [RankedRow(row=r, score=None) for r in sorted(rows, key=lambda r: r.created_at, reverse=True)]
    else:
        scored = [RankedRow(row=r, score=entry_score(r.votes, r.created_at, gravity, now)) for r in rows]
        ranked = sorted(scored, key=lambda s: (s.score, s.row.created_at), reverse=True)

    items = ranked[offset:offset + limit]
    return Page(items=items, offset=offset, limit=limit, has_more=len(items) == limit)


async def fetch_listing(
    db: AsyncSession,
    gravity: float,
    now: datetime | None = None,
    viewer_id: int | None = None,
    username: str | None = None,
    offset: int = 0,
    limit: int = DEFAULT_PAGE_SIZE,
    latest: bool = False,
) -> Page:
    now = now or datetime.now(timezone.utc)
    child = aliased(Entry)
    ncomments = (
        select(func.count(child.id)).where(child.parent_id == Entry.id).correlate(Entry).scalar_subquery()
    )
    stmt = (
        select(Entry, User.username, ncomments)
        .outerjoin(User, User.id == Entry.author_id)
        .where(Entry.kind == EntryKind.SUBMISSION.value)
    )
    if username:
        stmt = stmt.where(User.username == username)
    try:
        res = await db.execute(stmt)
        found = res.all()
    except SQLAlchemyError as e:
        log.error("fetch_listing: database error ({err})", err=e)
        raise StorageError("fetch_listing", e) from e

    ledger = VoteLedger(db)
    ids = [entry.id for entry, _, _ in found]
    counts = await ledger.counts(ids)
    mine = await ledger.voted(ids, viewer_id) if viewer_id is not None else set()

    rows = [
        ListingRow(entry=entry, author=author, votes=counts[entry.id], ncomments=int(n or 0), selfvote=entry.id in mine)
        for entry, author, n in found
    ]
    return rank(rows, now, gravity, offset=offset, limit=limit, latest=latest)
