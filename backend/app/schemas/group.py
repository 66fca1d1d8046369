"""Group/멤버십 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class GroupCreate(BaseModel):
    name: str
    description: Optional[str] = None
    join_policy: Literal["open", "approval"] = "approval"


class GroupOut(BaseModel):
    group_id: int
    name: str
    slug: str
    description: Optional[str] = None
    join_policy: Optional[str] = None
    is_system_group: bool
    created_at: Optional[datetime] = None
    role: Optional[str] = None

    model_config = {"from_attributes": True}


class GroupMemberAdd(BaseModel):
    user_id: int


class GroupMemberRoleUpdate(BaseModel):
    role: Literal["admin", "member"]


class GroupMemberOut(BaseModel):
    member_id: int
    group_id: int
    user_id: int
    username: Optional[str] = None
    role: str
    promoted_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CommunityModeratorOut(BaseModel):
    is_moderator: bool


class JoinResultOut(BaseModel):
    joined: bool
    requested: bool
    role: Optional[str] = None


class JoinRequestOut(BaseModel):
    request_id: int
    group_id: int
    user_id: int
    username: Optional[str] = None
    status: str
    requested_at: Optional[datetime] = None
    resolved_by: Optional[int] = None
    resolved_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
