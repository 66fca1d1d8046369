"""Arrangement 및 협업자/공동저자 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel

from app.schemas.content import OwnerInfo


class ArrangementBase(BaseModel):
    name: str
    key: Optional[str] = None
    tempo: Optional[int] = None
    capo: Optional[int] = None
    time_signature: Optional[str] = None
    chord_pro_content: str = ""
    tags: List[str] = []


class ArrangementCreate(ArrangementBase):
    song_id: int
    slug: str
    owner_type: Optional[Literal["group"]] = None
    owner_id: Optional[int] = None


class ArrangementUpdate(BaseModel):
    name: Optional[str] = None
    key: Optional[str] = None
    tempo: Optional[int] = None
    capo: Optional[int] = None
    time_signature: Optional[str] = None
    chord_pro_content: Optional[str] = None
    tags: Optional[List[str]] = None


class ArrangementOut(ArrangementBase):
    arrangement_id: int
    song_id: int
    slug: str
    created_by: int
    owner_type: Optional[str] = None
    owner_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ArrangementWithOwnerOut(ArrangementOut):
    owner: OwnerInfo


class CollaboratorAdd(BaseModel):
    user_id: int


class CollaboratorOut(BaseModel):
    collaborator_id: int
    arrangement_id: int
    user_id: int
    username: Optional[str] = None
    added_by: Optional[int] = None
    added_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthorAdd(BaseModel):
    user_id: int
    is_primary: bool = False


class AuthorOut(BaseModel):
    author_id: int
    arrangement_id: int
    user_id: int
    username: Optional[str] = None
    is_primary: bool
    added_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
