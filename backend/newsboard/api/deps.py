from __future__ import annotations
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from newsboard.db.session import get_db
from newsboard.services.auth import decode_token
from newsboard.services.votes import VoteLedger
from newsboard.models import User

bearer = HTTPBearer(auto_error=False)

async def _user_from_credentials(cred: HTTPAuthorizationCredentials, db: AsyncSession) -> User:
    try:
        payload = decode_token(cred.credentials)
        uid = int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token")
    res = await db.execute(select(User).where(User.id == uid))
    user = res.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not user.active:
        raise HTTPException(status_code=401, detail="Not an active user.")
    return user

async def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(status_code=401, detail="Not logged in.")
    return await _user_from_credentials(cred, db)

async def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    # Browsing is open to anonymous visitors; a bad token still fails loudly.
    if cred is None:
        return None
    return await _user_from_credentials(cred, db)

def get_ledger(db: AsyncSession = Depends(get_db)) -> VoteLedger:
    return VoteLedger(db)

async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="admin user required")
    return user
