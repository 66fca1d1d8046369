"""콘텐츠 소유자 표시 정보와 Community 이관/회수 흐름을 담당하는 도메인 서비스입니다."""

import logging
from typing import Any, Dict, Optional, Tuple, Union

from sqlalchemy.orm import Session

from app.database import atomic
from app.models.content import OWNER_TYPE_GROUP, ContentType, VersionableContent
from app.models.group import Group
from app.models.user import User
from app.services import content_service, version_service
from app.services.membership_service import is_admin_or_owner, resolve_community_group
from app.utils import permissions
from app.utils.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.utils.helpers import UNKNOWN_DISPLAY_NAME, user_display_name

logger = logging.getLogger(__name__)

TRANSFER_BOOTSTRAP_DESCRIPTION = "Original version (before community transfer)"


def unknown_owner() -> Dict[str, Any]:
    return {"type": "user", "id": None, "display_name": UNKNOWN_DISPLAY_NAME, "slug": None}


def owner_info(db: Session, content: VersionableContent) -> Dict[str, Any]:
    """표시용 소유자. 참조 대상이 사라졌으면 Unknown을 돌려주고 예외는 내지 않는다."""
    if content.is_group_owned:
        group = db.get(Group, content.owner_id)
        if group is None:
            return unknown_owner()
        return {
            "type": "group",
            "id": group.group_id,
            "display_name": group.name,
            "slug": group.slug,
        }

    user = db.get(User, content.created_by) if content.created_by is not None else None
    if user is None:
        return unknown_owner()
    return {
        "type": "user",
        "id": user.user_id,
        "display_name": user_display_name(user),
        "slug": None,
    }


def resolve_initial_owner(
    db: Session,
    owner_type: Optional[str],
    owner_id: Optional[int],
    current_user: User,
) -> Tuple[Optional[str], Optional[int]]:
    """생성 시점의 소유자를 검증한다. 지정이 없으면 개인 소유(None, None)다."""
    if owner_type != OWNER_TYPE_GROUP:
        return None, None
    if owner_id is None:
        raise InvalidStateError("그룹 소유로 만들려면 그룹을 지정해야 합니다.")
    group = db.get(Group, owner_id)
    if group is None:
        raise NotFoundError("그룹을 찾을 수 없습니다.")
    if group.is_system_group:
        raise InvalidStateError("Community 소유 콘텐츠는 직접 만들 수 없습니다. 만든 뒤 Community로 이관하세요.")
    if not is_admin_or_owner(db, group.group_id, current_user.user_id):
        raise PermissionDeniedError("그룹 관리자만 그룹 이름으로 콘텐츠를 만들 수 있습니다.")
    return OWNER_TYPE_GROUP, group.group_id


def transfer_to_community(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    current_user: User,
) -> Dict[str, Any]:
    content_type = ContentType(content_type)
    with atomic(db):
        content = content_service.require_content(db, content_type, content_id)
        if not permissions.is_original_creator(content, current_user.user_id):
            raise PermissionDeniedError("원작자만 Community로 이관할 수 있습니다.")

        community = resolve_community_group(db)
        if community is None:
            raise InvalidStateError("Community 그룹이 아직 생성되지 않았습니다.")
        if content.is_owned_by_group(community.group_id):
            raise InvalidStateError("이미 Community 소유 콘텐츠입니다.")

        # 소유권을 바꾸기 전에 원본 상태를 첫 이력으로 남긴다.
        # 아직 Community 소유가 아니므로 일반 스냅샷 규칙을 거치지 않고 직접 기록한다.
        version_service.create_content_version(
            db,
            content=content,
            changed_by=current_user.user_id,
            change_description=TRANSFER_BOOTSTRAP_DESCRIPTION,
        )
        content.set_group_owner(community.group_id)

    logger.info(
        "[ownership] %s:%s transferred to community group_id=%s by user=%s",
        content_type.value, content_id, community.group_id, current_user.user_id,
    )
    return {"success": True}


def reclaim_from_community(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    current_user: User,
) -> Dict[str, Any]:
    content_type = ContentType(content_type)
    with atomic(db):
        content = content_service.require_content(db, content_type, content_id)
        # Community 관리자라도 원작자가 아니면 회수할 수 없다.
        if not permissions.is_original_creator(content, current_user.user_id):
            raise PermissionDeniedError("원작자만 Community에서 회수할 수 있습니다.")
        if not permissions.is_community_owned(db, content):
            raise InvalidStateError("현재 Community 소유 콘텐츠가 아닙니다.")

        # 기존 이력은 지우지 않는다. 개인 소유가 되면 이력 조회 권한 조건에서 빠질 뿐이다.
        content.clear_owner()

    logger.info(
        "[ownership] %s:%s reclaimed from community by user=%s",
        content_type.value, content_id, current_user.user_id,
    )
    return {"success": True}
