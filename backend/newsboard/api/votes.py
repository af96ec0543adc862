# slowapi wraps these handlers; annotations must stay eagerly evaluated.
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.api.deps import get_current_user, get_ledger
from newsboard.api.schemas import VoteResult
from newsboard.core.limiter import limiter
from newsboard.core.logging import log
from newsboard.core.settings import settings
from newsboard.db.session import get_db
from newsboard.models import Entry, User
from newsboard.services.tokens import VoteClaim, VoteTokenCodec, get_vote_codec
from newsboard.services.votes import VoteLedger

router = APIRouter(tags=["votes"])


async def authorize_vote(op: str, tok: str | None, user: User, db: AsyncSession, codec: VoteTokenCodec) -> VoteClaim:
    """Turn a ``tok`` parameter into a claim the session user may act on, or raise 401."""
    if not tok:
        log.info("{op}: tok required", op=op)
        raise HTTPException(status_code=401, detail="tok required")

    claim = codec.decode(tok)
    if claim is None:
        log.info("{op}: invalid tok format", op=op)
        raise HTTPException(status_code=401, detail="invalid tok format")

    if await db.get(Entry, claim.entry_id) is None:
        log.info("{op}: entryid {id} doesn't exist", op=op, id=claim.entry_id)
        raise HTTPException(status_code=401, detail="entryid doesn't exist")
    if await db.get(User, claim.user_id) is None:
        log.info("{op}: userid {id} doesn't exist", op=op, id=claim.user_id)
        raise HTTPException(status_code=401, detail="user doesn't exist")
    if claim.user_id != user.id:
        log.warning("{op}: tok for user {tu} presented by user {su}", op=op, tu=claim.user_id, su=user.id)
        raise HTTPException(status_code=401, detail="tok does not match login")
    return claim


@router.post("/vote/", response_model=VoteResult)
@limiter.limit(settings.vote_rate_limit)
async def vote(
    request: Request,
    tok: str | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ledger: VoteLedger = Depends(get_ledger),
    codec: VoteTokenCodec = Depends(get_vote_codec),
):
    claim = await authorize_vote("vote", tok, user, db, codec)
    total = await ledger.cast_vote(claim.entry_id, claim.user_id)
    return VoteResult(entryid=claim.entry_id, userid=claim.user_id, totalvotes=total)


@router.post("/unvote/", response_model=VoteResult)
@limiter.limit(settings.vote_rate_limit)
async def unvote(
    request: Request,
    tok: str | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ledger: VoteLedger = Depends(get_ledger),
    codec: VoteTokenCodec = Depends(get_vote_codec),
):
    claim = await authorize_vote("unvote", tok, user, db, codec)
    total = await ledger.retract_vote(claim.entry_id, claim.user_id)
    return VoteResult(entryid=claim.entry_id, userid=claim.user_id, totalvotes=total)
