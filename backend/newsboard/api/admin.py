from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.db.session import get_db
from newsboard.api.deps import require_admin
from newsboard.api.schemas import ActiveIn, AdminFlagIn, SiteIn, SiteOut, UserOut
from newsboard.api.users import load_user, user_out
from newsboard.models import User
from newsboard.services.site import get_site, update_site
from newsboard.services.users import set_active, set_admin

router = APIRouter(prefix="/admin", tags=["admin"])

def _not_self(admin: User, target: User) -> None:
    # admins cannot demote or deactivate themselves
    if admin.id == target.id:
        raise HTTPException(status_code=400, detail="cannot change your own account flags")

@router.get("/site", response_model=SiteOut)
async def read_site(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    site = await get_site(db)
    return SiteOut(title=site.title, description=site.description, gravity=site.gravity)

@router.put("/site", response_model=SiteOut)
async def write_site(data: SiteIn, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    # points = num_votes / (hours_since_submission + 2) ^ gravity
    site = await update_site(db, data.title, data.description, data.gravity)
    return SiteOut(title=site.title, description=site.description, gravity=site.gravity)

@router.get("/users", response_model=list[UserOut])
async def list_users(admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(User).order_by(User.id))
    return [user_out(u) for u in res.scalars().all()]

@router.put("/users/{user_id}/active", response_model=UserOut)
async def activate_user(
    user_id: int, data: ActiveIn, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    target = await load_user(db, user_id)
    _not_self(admin, target)
    return user_out(await set_active(db, target, data.active))

@router.put("/users/{user_id}/admin", response_model=UserOut)
async def grant_admin(
    user_id: int, data: AdminFlagIn, admin: User = Depends(require_admin), db: AsyncSession = Depends(get_db)
):
    target = await load_user(db, user_id)
    _not_self(admin, target)
    return user_out(await set_admin(db, target, data.is_admin))
