from __future__ import annotations
from datetime import datetime, timedelta, timezone
from jose import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, InvalidHashError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.core.settings import settings
from newsboard.core.logging import log
from newsboard.models import User

ph = PasswordHasher()

def hash_password(password: str) -> str:
    return ph.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHashError):
        return False

async def authenticate(db: AsyncSession, username: str, password: str) -> User | None:
    """The active user behind these credentials, or None."""
    res = await db.execute(select(User).where(User.username == username))
    user = res.scalar_one_or_none()
    if user is None or not user.active:
        return None
    if not verify_password(password, user.password_hash):
        log.info("login: bad password for user {id}", id=user.id)
        return None
    # hasher parameters moved on since this hash was stored
    if ph.check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await db.commit()
    return user

def create_access_token(user_id: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.access_token_minutes)).timestamp()),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"], issuer=settings.jwt_issuer)
