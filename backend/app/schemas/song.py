"""Song 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from app.schemas.content import OwnerInfo


class SongBase(BaseModel):
    title: str
    artist: Optional[str] = None
    themes: List[str] = []
    copyright: Optional[str] = None
    lyrics: Optional[str] = None
    origin: Optional[str] = None


class SongCreate(SongBase):
    slug: str
    owner_type: Optional[Literal["group"]] = None
    owner_id: Optional[int] = None


class SongUpdate(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    themes: Optional[List[str]] = None
    copyright: Optional[str] = None
    lyrics: Optional[str] = None
    origin: Optional[str] = None


class SongOut(SongBase):
    song_id: int
    slug: str
    created_by: int
    owner_type: Optional[str] = None
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SongWithOwnerOut(SongOut):
    owner: OwnerInfo
