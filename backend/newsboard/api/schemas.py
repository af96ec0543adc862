from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class RegisterIn(BaseModel):
    username: str = Field(min_length=1, max_length=64, pattern=r"^\S+$")
    password: str = Field(min_length=8, max_length=128)

class LoginIn(BaseModel):
    username: str
    password: str

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"

class SubmissionIn(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    url: str = Field(default="", max_length=2000)
    body: str = Field(default="", max_length=20000)

class CommentIn(BaseModel):
    body: str = Field(min_length=1, max_length=20000)

class EntryEditIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    url: Optional[str] = Field(default=None, max_length=2000)
    body: Optional[str] = Field(default=None, max_length=20000)

class EntryOut(BaseModel):
    id: int
    kind: str
    title: str
    url: str
    body: str
    created_at: datetime
    author_id: int
    author: Optional[str] = None
    parent_id: Optional[int] = None

class ListingEntryOut(BaseModel):
    entry: EntryOut
    totalvotes: int
    ncomments: int
    selfvote: bool
    points: Optional[float] = None
    votetok: Optional[str] = None

class ListingOut(BaseModel):
    items: list[ListingEntryOut]
    offset: int
    limit: int
    more: bool

class CommentOut(BaseModel):
    entry: EntryOut
    parent_author: Optional[str] = None
    depth: int

class ItemOut(BaseModel):
    entry: EntryOut
    root: EntryOut
    totalvotes: int
    selfvote: bool
    points: float
    votetok: Optional[str] = None
    comments: list[CommentOut]

class VoteResult(BaseModel):
    entryid: int
    userid: int
    totalvotes: int

class SiteIn(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=500)
    gravity: float = Field(ge=0.0)

class SiteOut(BaseModel):
    title: str
    description: str
    gravity: float

class UserEditIn(BaseModel):
    username: Optional[str] = Field(default=None, min_length=1, max_length=64, pattern=r"^\S+$")
    password: Optional[str] = Field(default=None, min_length=8, max_length=128)
    password2: Optional[str] = None

class UserOut(BaseModel):
    id: int
    username: str
    active: bool
    is_admin: bool
    created_at: datetime

class ActiveIn(BaseModel):
    active: bool

class AdminFlagIn(BaseModel):
    is_admin: bool
