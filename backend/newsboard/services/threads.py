from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.core.errors import StorageError
from newsboard.core.logging import log
from newsboard.models import Entry, EntryKind, User, Vote

# Upper bound on parent hops; guards against a corrupted parent cycle.
MAX_ROOT_HOPS = 100


@dataclass
class ThreadNode:
    entry: Entry
    author: str | None
    parent_author: str | None
    depth: int


async def _children(db: AsyncSession, parent_id: int) -> list[tuple[Entry, str | None]]:
    try:
        res = await db.execute(
            select(Entry, User.username)
            .outerjoin(User, User.id == Entry.author_id)
            .where(Entry.parent_id == parent_id, Entry.kind == EntryKind.COMMENT.value)
            .order_by(Entry.id.asc())
        )
    except SQLAlchemyError as e:
        log.error("walk_thread: database error ({err})", err=e)
        raise StorageError("walk_thread", e) from e
    return [(entry, username) for entry, username in res.all()]


async def _author_of(db: AsyncSession, entry_id: int) -> str | None:
    try:
        res = await db.execute(
            select(User.username).join(Entry, Entry.author_id == User.id).where(Entry.id == entry_id)
        )
    except SQLAlchemyError as e:
        log.error("walk_thread: database error ({err})", err=e)
        raise StorageError("walk_thread", e) from e
    return res.scalar_one_or_none()


async def walk_thread(db: AsyncSession, root_id: int) -> AsyncIterator[ThreadNode]:
    """
    Yield every transitive reply under ``root_id``, depth first.

    Siblings come out in id (creation) order. Direct replies of the root have
    depth 0. Children are only fetched once their parent has been yielded, so
    a storage failure part way through leaves the earlier nodes delivered.
    """
    seen = {root_id}
    stack: list[tuple[Entry, str | None, str | None, int]] = []

    root_author = await _author_of(db, root_id)
    for child, author in reversed(await _children(db, root_id)):
        seen.add(child.id)
        stack.append((child, author, root_author, 0))

    while stack:
        entry, author, parent_author, depth = stack.pop()
        yield ThreadNode(entry=entry, author=author, parent_author=parent_author, depth=depth)

        for child, child_author in reversed(await _children(db, entry.id)):
            if child.id in seen:
                continue
            seen.add(child.id)
            stack.append((child, child_author, author, depth + 1))


async def find_root(db: AsyncSession, entry_id: int, max_hops: int = MAX_ROOT_HOPS) -> Entry | None:
    try:
        entry = await db.get(Entry, entry_id)
        hops = 0
        while entry is not None and entry.parent_id:
            hops += 1
            if hops > max_hops:
                log.warning("find_root: gave up after {n} hops from entry {id}", n=max_hops, id=entry_id)
                break
            parent = await db.get(Entry, entry.parent_id)
            if parent is None:
                break
            entry = parent
    except SQLAlchemyError as e:
        log.error("find_root: database error ({err})", err=e)
        raise StorageError("find_root", e) from e
    return entry


async def delete_tree(db: AsyncSession, entry_id: int) -> int:
    """Delete an entry with all of its descendants and their votes, atomically."""
    try:
        if await db.get(Entry, entry_id) is None:
            return 0
        ids = [entry_id]
        seen = {entry_id}
        frontier = [entry_id]
        while frontier:
            res = await db.execute(select(Entry.id).where(Entry.parent_id.in_(frontier)))
            frontier = [cid for cid in res.scalars().all() if cid not in seen]
            seen.update(frontier)
            ids.extend(frontier)

        await db.execute(delete(Vote).where(Vote.entry_id.in_(ids)))
        await db.execute(delete(Entry).where(Entry.id.in_(ids)))
        await db.commit()
    except SQLAlchemyError as e:
        log.error("delete_tree: database error ({err})", err=e)
        await db.rollback()
        raise StorageError("delete_tree", e) from e
    log.info("deleted entry {id} and {n} descendants", id=entry_id, n=len(ids) - 1)
    return len(ids)
