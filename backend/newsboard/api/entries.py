from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import datetime, timezone

from newsboard.db.session import get_db
from newsboard.api.deps import get_current_user, get_optional_user, get_ledger
from newsboard.api.schemas import (
    CommentIn, CommentOut, EntryEditIn, EntryOut, ItemOut, ListingEntryOut, ListingOut, SubmissionIn,
)
from newsboard.core.logging import log
from newsboard.core.settings import settings
from newsboard.models import Entry, EntryKind, User
from newsboard.services.listing import fetch_listing
from newsboard.services.scoring import entry_score
from newsboard.services.site import get_site
from newsboard.services.threads import delete_tree, find_root, walk_thread
from newsboard.services.tokens import VoteTokenCodec, get_vote_codec
from newsboard.services.votes import VoteLedger

router = APIRouter(tags=["entries"])

def entry_out(e: Entry, author: str | None) -> EntryOut:
    return EntryOut(
        id=e.id, kind=e.kind, title=e.title, url=e.url, body=e.body, created_at=e.created_at,
        author_id=e.author_id, author=author, parent_id=e.parent_id or None,
    )

async def _load(db: AsyncSession, entry_id: int) -> tuple[Entry, str | None]:
    res = await db.execute(
        select(Entry, User.username).outerjoin(User, User.id == Entry.author_id).where(Entry.id == entry_id)
    )
    row = res.first()
    if row is None:
        raise HTTPException(status_code=404, detail="Not found.")
    return row[0], row[1]

def _require_owner(entry: Entry, user: User) -> None:
    if not user.is_admin and entry.author_id != user.id:
        raise HTTPException(status_code=403, detail="admin or entry submitter required")

@router.get("/", response_model=ListingOut)
async def listing(
    username: str | None = None,
    latest: bool = False,
    offset: int = 0,
    limit: int = 0,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    codec: VoteTokenCodec = Depends(get_vote_codec),
):
    site = await get_site(db)
    page = await fetch_listing(
        db,
        site.gravity,
        viewer_id=user.id if user else None,
        username=username,
        offset=offset,
        limit=limit if limit > 0 else settings.page_size,
        latest=latest,
    )
    items = [
        ListingEntryOut(
            entry=entry_out(r.row.entry, r.row.author),
            totalvotes=r.row.votes,
            ncomments=r.row.ncomments,
            selfvote=r.row.selfvote,
            points=r.score,
            votetok=codec.encode(r.row.entry.id, user.id) if user else None,
        )
        for r in page.items
    ]
    return ListingOut(items=items, offset=page.offset, limit=page.limit, more=page.has_more)

@router.get("/item/{entry_id}", response_model=ItemOut)
async def item(
    entry_id: int,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
    ledger: VoteLedger = Depends(get_ledger),
    codec: VoteTokenCodec = Depends(get_vote_codec),
):
    entry, author = await _load(db, entry_id)
    root = await find_root(db, entry.id) or entry
    root_author = author if root.id == entry.id else (await _load(db, root.id))[1]

    site = await get_site(db)
    votes = await ledger.vote_count(entry.id)
    comments = [
        CommentOut(entry=entry_out(n.entry, n.author), parent_author=n.parent_author, depth=n.depth)
        async for n in walk_thread(db, entry.id)
    ]
    return ItemOut(
        entry=entry_out(entry, author),
        root=entry_out(root, root_author),
        totalvotes=votes,
        selfvote=await ledger.has_voted(entry.id, user.id) if user else False,
        points=entry_score(votes, entry.created_at, site.gravity),
        votetok=codec.encode(entry.id, user.id) if user else None,
        comments=comments,
    )

@router.post("/submit", response_model=EntryOut, status_code=201)
async def submit(data: SubmissionIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    entry = Entry(
        kind=EntryKind.SUBMISSION.value,
        title=data.title.strip(),
        url=data.url.strip(),
        body=data.body,
        created_at=datetime.now(timezone.utc),
        author_id=user.id,
        parent_id=None,
    )
    db.add(entry)
    await db.commit()
    log.info("user {uid} submitted entry {id}", uid=user.id, id=entry.id)
    return entry_out(entry, user.username)

@router.post("/item/{entry_id}/comments", response_model=EntryOut, status_code=201)
async def comment(entry_id: int, data: CommentIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    parent, _ = await _load(db, entry_id)
    reply = Entry(
        kind=EntryKind.COMMENT.value,
        title="",
        url="",
        body=data.body,
        created_at=datetime.now(timezone.utc),
        author_id=user.id,
        parent_id=parent.id,
    )
    db.add(reply)
    await db.commit()
    return entry_out(reply, user.username)

@router.patch("/entries/{entry_id}", response_model=EntryOut)
async def edit(entry_id: int, data: EntryEditIn, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    entry, author = await _load(db, entry_id)
    _require_owner(entry, user)
    if data.body is not None:
        entry.body = data.body
    # comments only carry a body
    if entry.kind != EntryKind.COMMENT.value:
        if data.title is not None:
            entry.title = data.title.strip()
        if data.url is not None:
            entry.url = data.url.strip()
    await db.commit()
    return entry_out(entry, author)

@router.delete("/entries/{entry_id}")
async def remove(entry_id: int, user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db)):
    entry, _ = await _load(db, entry_id)
    _require_owner(entry, user)
    n = await delete_tree(db, entry.id)
    return {"ok": True, "deleted": n}
