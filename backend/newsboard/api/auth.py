from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from newsboard.db.session import get_db
from newsboard.api.schemas import RegisterIn, LoginIn, TokenOut
from newsboard.services.auth import authenticate, create_access_token
from newsboard.services.users import UsernameTaken, create_user

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=dict, status_code=201)
async def register(data: RegisterIn, db: AsyncSession = Depends(get_db)):
    # the unique index decides; concurrent duplicates lose at commit
    try:
        user = await create_user(db, data.username, data.password)
    except UsernameTaken:
        raise HTTPException(status_code=409, detail="Username already exists")
    return {"ok": True, "userid": user.id}

@router.post("/login", response_model=TokenOut)
async def login(data: LoginIn, db: AsyncSession = Depends(get_db)):
    user = await authenticate(db, data.username, data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenOut(access_token=create_access_token(user.id))
