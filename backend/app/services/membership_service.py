"""그룹 멤버십 조회와 그룹 관리 규칙을 담당하는 도메인 서비스입니다."""

import logging
import re
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.database import atomic
from app.models.group import (
    Group,
    GroupJoinRequest,
    GroupMember,
    JOIN_POLICY_OPEN,
    MANAGER_ROLES,
    REQUEST_APPROVED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    ROLE_ADMIN,
    ROLE_MEMBER,
    ROLE_OWNER,
)
from app.models.user import User
from app.schemas.group import GroupCreate
from app.utils.errors import InvalidStateError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Membership Resolver
# ---------------------------------------------------------------------------

def resolve_community_group(db: Session) -> Optional[Group]:
    # is_system_group 부분 유니크 인덱스를 사용하는 단건 조회
    return db.query(Group).filter(Group.is_system_group == True).first()  # noqa: E712


def is_community_group(db: Session, group_id: Optional[int]) -> bool:
    if group_id is None:
        return False
    community = resolve_community_group(db)
    return community is not None and community.group_id == int(group_id)


def get_membership(db: Session, group_id: int, user_id: int) -> Optional[GroupMember]:
    return db.query(GroupMember).filter(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
    ).first()


def membership_of(db: Session, group_id: int, user_id: int) -> Optional[str]:
    membership = get_membership(db, group_id, user_id)
    return membership.role if membership else None


def is_admin_or_owner(db: Session, group_id: int, user_id: int) -> bool:
    return membership_of(db, group_id, user_id) in MANAGER_ROLES


def is_member(db: Session, group_id: int, user_id: int) -> bool:
    return membership_of(db, group_id, user_id) is not None


def can_manage_member(actor: GroupMember, target: GroupMember) -> bool:
    """선임 규칙: owner는 모두, admin은 member와 자신보다 늦게 승격된 admin만 관리한다."""
    if actor.role == ROLE_OWNER:
        return True
    if actor.role != ROLE_ADMIN:
        return False
    if target.role == ROLE_OWNER:
        return False
    if target.role == ROLE_MEMBER:
        return True
    if not actor.promoted_at or not target.promoted_at:
        return False
    return actor.promoted_at < target.promoted_at


# ---------------------------------------------------------------------------
# Group management
# ---------------------------------------------------------------------------

def generate_slug(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").strip().lower())
    return slug.strip("-") or "group"


def _unique_slug(db: Session, name: str) -> str:
    base = generate_slug(name)
    slug = base
    counter = 1
    while db.query(Group.group_id).filter(Group.slug == slug).first():
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def ensure_community_group(db: Session, owner: Optional[User] = None) -> Group:
    """Community 그룹이 없으면 생성한다. 이미 있으면 그대로 반환한다."""
    existing = resolve_community_group(db)
    if existing:
        return existing
    with atomic(db):
        group = Group(
            name=settings.COMMUNITY_GROUP_NAME,
            slug=_unique_slug(db, settings.COMMUNITY_GROUP_SLUG),
            description=settings.COMMUNITY_GROUP_DESCRIPTION,
            join_policy=JOIN_POLICY_OPEN,
            is_system_group=True,
            created_by=owner.user_id if owner else None,
        )
        db.add(group)
        db.flush()
        if owner:
            db.add(GroupMember(group_id=group.group_id, user_id=owner.user_id, role=ROLE_OWNER))
    db.refresh(group)
    logger.info("[groups] community group provisioned: group_id=%s slug=%s", group.group_id, group.slug)
    return group


def get_group(db: Session, group_id: int) -> Group:
    group = db.get(Group, group_id)
    if not group:
        raise NotFoundError("그룹을 찾을 수 없습니다.")
    return group


def get_group_by_slug(db: Session, slug: str) -> Group:
    group = db.query(Group).filter(Group.slug == slug).first()
    if not group:
        raise NotFoundError("그룹을 찾을 수 없습니다.")
    return group


def get_community_group(db: Session) -> Group:
    group = resolve_community_group(db)
    if not group:
        raise NotFoundError("Community 그룹이 아직 생성되지 않았습니다.")
    return group


def create_group(db: Session, data: GroupCreate, current_user: User) -> Group:
    with atomic(db):
        group = Group(
            name=data.name,
            slug=_unique_slug(db, data.name),
            description=data.description,
            join_policy=data.join_policy,
            is_system_group=False,
            created_by=current_user.user_id,
        )
        db.add(group)
        db.flush()
        db.add(GroupMember(group_id=group.group_id, user_id=current_user.user_id, role=ROLE_OWNER))
    db.refresh(group)
    return group


def list_user_groups(db: Session, current_user: User) -> List[dict]:
    rows = (
        db.query(Group, GroupMember.role)
        .join(GroupMember, GroupMember.group_id == Group.group_id)
        .filter(GroupMember.user_id == current_user.user_id)
        .order_by(Group.name.asc())
        .all()
    )
    return [_group_with_role(group, role) for group, role in rows]


def get_group_with_role(db: Session, group: Group, current_user: User) -> dict:
    return _group_with_role(group, membership_of(db, group.group_id, current_user.user_id))


def _group_with_role(group: Group, role: Optional[str]) -> dict:
    return {
        "group_id": group.group_id,
        "name": group.name,
        "slug": group.slug,
        "description": group.description,
        "join_policy": group.join_policy,
        "is_system_group": bool(group.is_system_group),
        "created_at": group.created_at,
        "role": role,
    }


def list_members(db: Session, group_id: int) -> List[GroupMember]:
    get_group(db, group_id)
    return (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group_id)
        .order_by(GroupMember.joined_at.asc(), GroupMember.member_id.asc())
        .all()
    )


def _pending_request(db: Session, group_id: int, user_id: int) -> Optional[GroupJoinRequest]:
    return db.query(GroupJoinRequest).filter(
        GroupJoinRequest.group_id == group_id,
        GroupJoinRequest.user_id == user_id,
        GroupJoinRequest.status == REQUEST_PENDING,
    ).first()


def join_group(db: Session, group_id: int, current_user: User) -> dict:
    """공개 그룹과 Community는 바로 가입하고, 승인제 그룹은 가입 요청을 남긴다."""
    group = get_group(db, group_id)
    if get_membership(db, group_id, current_user.user_id):
        raise InvalidStateError("이미 그룹 멤버입니다.")
    if _pending_request(db, group_id, current_user.user_id):
        raise InvalidStateError("이미 처리 대기 중인 가입 요청이 있습니다.")

    if group.is_system_group or group.join_policy == JOIN_POLICY_OPEN:
        with atomic(db):
            db.add(GroupMember(group_id=group_id, user_id=current_user.user_id, role=ROLE_MEMBER))
        return {"joined": True, "requested": False, "role": ROLE_MEMBER}

    with atomic(db):
        db.add(GroupJoinRequest(group_id=group_id, user_id=current_user.user_id, status=REQUEST_PENDING))
    logger.info("[groups] join requested: group_id=%s user=%s", group_id, current_user.user_id)
    return {"joined": False, "requested": True, "role": None}


def cancel_join_request(db: Session, group_id: int, current_user: User) -> None:
    get_group(db, group_id)
    request = _pending_request(db, group_id, current_user.user_id)
    if not request:
        raise NotFoundError("처리 대기 중인 가입 요청이 없습니다.")
    with atomic(db):
        db.delete(request)


def list_join_requests(db: Session, group_id: int, current_user: User) -> List[GroupJoinRequest]:
    get_group(db, group_id)
    if not is_admin_or_owner(db, group_id, current_user.user_id):
        raise PermissionDeniedError("그룹 관리자만 가입 요청을 볼 수 있습니다.")
    return (
        db.query(GroupJoinRequest)
        .filter(GroupJoinRequest.group_id == group_id, GroupJoinRequest.status == REQUEST_PENDING)
        .order_by(GroupJoinRequest.request_id.asc())
        .all()
    )


def _get_open_request(db: Session, request_id: int, current_user: User) -> GroupJoinRequest:
    request = db.get(GroupJoinRequest, request_id)
    if not request or request.status != REQUEST_PENDING:
        raise NotFoundError("가입 요청을 찾을 수 없거나 이미 처리되었습니다.")
    if not is_admin_or_owner(db, request.group_id, current_user.user_id):
        raise PermissionDeniedError("그룹 관리자만 가입 요청을 처리할 수 있습니다.")
    return request


def approve_join_request(db: Session, request_id: int, current_user: User) -> GroupJoinRequest:
    request = _get_open_request(db, request_id, current_user)
    with atomic(db):
        request.status = REQUEST_APPROVED
        request.resolved_by = current_user.user_id
        request.resolved_at = datetime.utcnow()
        if not get_membership(db, request.group_id, request.user_id):
            db.add(GroupMember(group_id=request.group_id, user_id=request.user_id, role=ROLE_MEMBER))
    db.refresh(request)
    logger.info(
        "[groups] join approved: group_id=%s user=%s by=%s",
        request.group_id, request.user_id, current_user.user_id,
    )
    return request


def reject_join_request(db: Session, request_id: int, current_user: User) -> GroupJoinRequest:
    request = _get_open_request(db, request_id, current_user)
    with atomic(db):
        request.status = REQUEST_REJECTED
        request.resolved_by = current_user.user_id
        request.resolved_at = datetime.utcnow()
    db.refresh(request)
    return request


def add_member(db: Session, group_id: int, user_id: int, current_user: User) -> GroupMember:
    get_group(db, group_id)
    if not is_admin_or_owner(db, group_id, current_user.user_id):
        raise PermissionDeniedError("그룹 관리자만 멤버를 추가할 수 있습니다.")
    if not db.get(User, user_id):
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    if get_membership(db, group_id, user_id):
        raise InvalidStateError("이미 그룹 멤버입니다.")
    with atomic(db):
        membership = GroupMember(group_id=group_id, user_id=user_id, role=ROLE_MEMBER)
        db.add(membership)
    db.refresh(membership)
    return membership


def set_member_role(db: Session, group_id: int, user_id: int, role: str, current_user: User) -> GroupMember:
    get_group(db, group_id)
    actor = get_membership(db, group_id, current_user.user_id)
    if not actor or actor.role not in MANAGER_ROLES:
        raise PermissionDeniedError("그룹 관리자만 역할을 변경할 수 있습니다.")
    target = get_membership(db, group_id, user_id)
    if not target:
        raise NotFoundError("그룹 멤버가 아닙니다.")
    if role not in (ROLE_ADMIN, ROLE_MEMBER):
        raise InvalidStateError("변경할 수 없는 역할입니다.")
    if target.role == ROLE_OWNER:
        raise InvalidStateError("소유자의 역할은 변경할 수 없습니다.")
    if target.role == role:
        return target

    if role == ROLE_ADMIN:
        # 승격 시점이 선임 순서를 정한다.
        with atomic(db):
            target.role = ROLE_ADMIN
            target.promoted_at = datetime.utcnow()
    else:
        if not can_manage_member(actor, target):
            raise PermissionDeniedError("더 선임인 관리자는 강등할 수 없습니다.")
        with atomic(db):
            target.role = ROLE_MEMBER
            target.promoted_at = None
    db.refresh(target)
    return target


def remove_member(db: Session, group_id: int, user_id: int, current_user: User) -> None:
    get_group(db, group_id)
    actor = get_membership(db, group_id, current_user.user_id)
    if not actor:
        raise PermissionDeniedError("그룹 멤버가 아닙니다.")
    target = get_membership(db, group_id, user_id)
    if not target:
        raise NotFoundError("그룹 멤버가 아닙니다.")
    # 본인 탈퇴는 소유권 승계가 있는 leave_group으로만 처리한다.
    if target.user_id == actor.user_id:
        raise InvalidStateError("본인은 내보낼 수 없습니다. 그룹 탈퇴를 이용하세요.")
    if target.role == ROLE_OWNER:
        raise PermissionDeniedError("그룹 소유자는 내보낼 수 없습니다.")
    if not can_manage_member(actor, target):
        raise PermissionDeniedError("이 멤버를 내보낼 권한이 없습니다.")
    with atomic(db):
        db.delete(target)


def leave_group(db: Session, group_id: int, current_user: User) -> None:
    group = get_group(db, group_id)
    membership = get_membership(db, group_id, current_user.user_id)
    if not membership:
        raise InvalidStateError("그룹 멤버가 아닙니다.")

    with atomic(db):
        if membership.role == ROLE_OWNER:
            others = (
                db.query(GroupMember)
                .filter(GroupMember.group_id == group_id, GroupMember.user_id != current_user.user_id)
                .all()
            )
            if not others:
                # 그룹이 소유한 콘텐츠의 owner_id가 깨지지 않도록 마지막 멤버의 탈퇴는 막는다.
                raise InvalidStateError("다른 멤버가 없는 그룹의 소유자는 탈퇴할 수 없습니다.")
            admins = sorted(
                (m for m in others if m.role == ROLE_ADMIN),
                key=lambda m: m.promoted_at or datetime.min,
            )
            successor = admins[0] if admins else sorted(
                others, key=lambda m: (m.joined_at or datetime.min, m.member_id)
            )[0]
            successor.role = ROLE_OWNER
            successor.promoted_at = None
            logger.info(
                "[groups] ownership passed on leave: group_id=%s from=%s to=%s",
                group.group_id, current_user.user_id, successor.user_id,
            )
        db.delete(membership)
