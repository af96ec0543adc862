from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.db.session import get_db
from newsboard.api.deps import get_current_user
from newsboard.api.schemas import UserEditIn, UserOut
from newsboard.core.logging import log
from newsboard.models import User
from newsboard.services.users import UsernameTaken, update_user

router = APIRouter(prefix="/users", tags=["users"])

def user_out(u: User) -> UserOut:
    return UserOut(id=u.id, username=u.username, active=u.active, is_admin=u.is_admin, created_at=u.created_at)

async def load_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="user doesn't exist")
    return user

@router.get("/{user_id}", response_model=UserOut)
async def read_user(user_id: int, db: AsyncSession = Depends(get_db)):
    return user_out(await load_user(db, user_id))

@router.patch("/{user_id}", response_model=UserOut)
async def edit_user(
    user_id: int,
    data: UserEditIn,
    login: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not login.is_admin and login.id != user_id:
        log.info("edit user {id}: refused for user {uid}", id=user_id, uid=login.id)
        raise HTTPException(status_code=403, detail="admin or self user required")
    target = await load_user(db, user_id)

    if data.password is not None and data.password != data.password2:
        raise HTTPException(status_code=400, detail="re-entered password doesn't match")
    username = data.username if data.username is not None and data.username != target.username else None
    try:
        target = await update_user(db, target, username=username, password=data.password)
    except UsernameTaken as e:
        raise HTTPException(status_code=409, detail=str(e))
    return user_out(target)
