"""곡/편곡이 함께 쓰는 소유자·권한 응답 스키마입니다."""

from typing import Literal, Optional

from pydantic import BaseModel


class OwnerInfo(BaseModel):
    type: Literal["user", "group"]
    id: Optional[int] = None
    display_name: str
    slug: Optional[str] = None


class EditCapabilityOut(BaseModel):
    can_edit: bool
    is_owner: bool
    is_original_creator: bool


class OwnershipResult(BaseModel):
    success: bool
