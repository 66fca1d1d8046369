"""Groups 기능 API 라우터입니다. 그룹 생성과 멤버십 변경을 서비스 레이어로 위임합니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.user import User
from app.schemas.group import (
    GroupCreate,
    GroupMemberAdd,
    GroupMemberOut,
    GroupMemberRoleUpdate,
    GroupOut,
    JoinRequestOut,
    JoinResultOut,
)
from app.services import membership_service

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=List[GroupOut])
def list_my_groups(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return membership_service.list_user_groups(db, current_user)


@router.post("", response_model=GroupOut)
def create_group(
    data: GroupCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    group = membership_service.create_group(db, data, current_user)
    return membership_service.get_group_with_role(db, group, current_user)


@router.get("/community", response_model=GroupOut)
def get_community_group(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    group = membership_service.get_community_group(db)
    return membership_service.get_group_with_role(db, group, current_user)


@router.get("/by-slug/{slug}", response_model=GroupOut)
def get_group_by_slug(slug: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    group = membership_service.get_group_by_slug(db, slug)
    return membership_service.get_group_with_role(db, group, current_user)


@router.get("/{group_id}/members", response_model=List[GroupMemberOut])
def list_members(group_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return membership_service.list_members(db, group_id)


@router.post("/{group_id}/join", response_model=JoinResultOut)
def join_group(group_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return membership_service.join_group(db, group_id, current_user)


@router.delete("/{group_id}/join-requests/me")
def cancel_join_request(group_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    membership_service.cancel_join_request(db, group_id, current_user)
    return {"message": "가입 요청을 취소했습니다."}


@router.get("/{group_id}/join-requests", response_model=List[JoinRequestOut])
def list_join_requests(group_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return membership_service.list_join_requests(db, group_id, current_user)


@router.post("/join-requests/{request_id}/approve", response_model=JoinRequestOut)
def approve_join_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.approve_join_request(db, request_id, current_user)


@router.post("/join-requests/{request_id}/reject", response_model=JoinRequestOut)
def reject_join_request(
    request_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.reject_join_request(db, request_id, current_user)


@router.post("/{group_id}/members", response_model=GroupMemberOut)
def add_member(
    group_id: int,
    data: GroupMemberAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.add_member(db, group_id, data.user_id, current_user)


@router.put("/{group_id}/members/{user_id}", response_model=GroupMemberOut)
def set_member_role(
    group_id: int,
    user_id: int,
    data: GroupMemberRoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return membership_service.set_member_role(db, group_id, user_id, data.role, current_user)


@router.delete("/{group_id}/members/{user_id}")
def remove_member(
    group_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    membership_service.remove_member(db, group_id, user_id, current_user)
    return {"message": "삭제되었습니다."}


@router.post("/{group_id}/leave")
def leave_group(group_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    membership_service.leave_group(db, group_id, current_user)
    return {"message": "그룹에서 탈퇴했습니다."}
