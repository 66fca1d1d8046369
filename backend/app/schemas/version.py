"""콘텐츠 스냅샷/버전 이력 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator


class SongSnapshot(BaseModel):
    title: Optional[str] = None
    artist: Optional[str] = None
    themes: List[str] = []
    copyright: Optional[str] = None
    lyrics: Optional[str] = None

    @field_validator("themes", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []


class ArrangementSnapshot(BaseModel):
    name: Optional[str] = None
    key: Optional[str] = None
    tempo: Optional[int] = None
    capo: Optional[int] = None
    time_signature: Optional[str] = None
    chord_pro_content: Optional[str] = None
    tags: List[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return value or []


class UserInfo(BaseModel):
    user_id: int
    username: str
    display_name: str


class ContentVersionOut(BaseModel):
    version_id: int
    content_type: str
    content_id: int
    version: int
    snapshot: Dict[str, Any]
    changed_by: int
    changed_by_user: Optional[UserInfo] = None
    changed_at: datetime
    change_description: Optional[str] = None


class RollbackResult(BaseModel):
    success: bool = True
    content_type: str
    content_id: int
    restored_version: int
    latest_version: int


class VersionAccessOut(BaseModel):
    can_access: bool
