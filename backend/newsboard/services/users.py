from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.core.errors import StorageError
from newsboard.core.logging import log
from newsboard.models import User
from newsboard.services.auth import hash_password


class UsernameTaken(Exception):
    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"username '{username}' already exists")


async def _commit(db: AsyncSession, op: str, username: str) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        log.info("{op}: username {name} already taken", op=op, name=username)
        raise UsernameTaken(username) from e
    except SQLAlchemyError as e:
        await db.rollback()
        log.error("{op}: database error ({err})", op=op, err=e)
        raise StorageError(op, e) from e


async def create_user(db: AsyncSession, username: str, password: str) -> User:
    """Create an active account. The first account on a fresh board is its admin."""
    try:
        existing = (await db.execute(select(func.count()).select_from(User))).scalar_one()
    except SQLAlchemyError as e:
        log.error("create_user: database error ({err})", err=e)
        raise StorageError("create_user", e) from e
    user = User(
        username=username,
        password_hash=hash_password(password),
        active=True,
        is_admin=existing == 0,
        created_at=datetime.now(timezone.utc),
    )
    db.add(user)
    await _commit(db, "create_user", username)
    log.info("registered user {id} ({name}) admin={admin}", id=user.id, name=user.username, admin=user.is_admin)
    return user


async def update_user(
    db: AsyncSession, user: User, username: str | None = None, password: str | None = None
) -> User:
    new_name = username if username is not None else user.username
    if username is not None:
        user.username = username
    if password is not None:
        user.password_hash = hash_password(password)
    await _commit(db, "update_user", new_name)
    log.info("updated user {id} (rename={rn}, password={pw})", id=user.id, rn=username is not None, pw=password is not None)
    return user


async def set_active(db: AsyncSession, user: User, active: bool) -> User:
    user.active = active
    await _commit(db, "set_active", user.username)
    log.info("user {id} active={active}", id=user.id, active=active)
    return user


async def set_admin(db: AsyncSession, user: User, is_admin: bool) -> User:
    user.is_admin = is_admin
    await _commit(db, "set_admin", user.username)
    log.info("user {id} is_admin={admin}", id=user.id, admin=is_admin)
    return user
