"""곡/편곡 편집 권한과 버전 이력 접근 권한을 판정하는 공용 헬퍼입니다.

모든 함수는 부수 효과가 없고 예외를 던지지 않는다. 대상이 없으면 False를 반환하며,
False를 사용자 오류(403)로 바꾸는 것은 호출하는 서비스 레이어의 몫이다.
"""

from typing import Callable, Dict, Optional, Union

from sqlalchemy.orm import Session

from app.models.arrangement import Arrangement, ArrangementAuthor, ArrangementCollaborator
from app.models.content import ContentType, VersionableContent
from app.models.group import Group
from app.models.song import Song
from app.services import content_service
from app.services.membership_service import is_admin_or_owner, is_member, resolve_community_group


def is_original_creator(content: VersionableContent, user_id: int) -> bool:
    return content.created_by is not None and int(content.created_by) == int(user_id)


def is_community_owned(
    db: Session,
    content: Optional[VersionableContent],
    community: Optional[Group] = None,
) -> bool:
    if content is None or not content.is_group_owned:
        return False
    community = community or resolve_community_group(db)
    if community is None:
        return False
    return content.is_owned_by_group(community.group_id)


def is_community_moderator(db: Session, user_id: int) -> bool:
    community = resolve_community_group(db)
    if community is None:
        return False
    return is_admin_or_owner(db, community.group_id, user_id)


def is_arrangement_collaborator(db: Session, arrangement_id: int, user_id: int) -> bool:
    return db.query(ArrangementCollaborator).filter(
        ArrangementCollaborator.arrangement_id == arrangement_id,
        ArrangementCollaborator.user_id == user_id,
    ).first() is not None


def is_arrangement_author(db: Session, arrangement_id: int, user_id: int) -> bool:
    return db.query(ArrangementAuthor).filter(
        ArrangementAuthor.arrangement_id == arrangement_id,
        ArrangementAuthor.user_id == user_id,
    ).first() is not None


def can_edit_song(db: Session, song: Song, user_id: int) -> bool:
    # 원작자는 소유권이 옮겨가도 항상 편집할 수 있다.
    if is_original_creator(song, user_id):
        return True

    if song.is_group_owned:
        if is_community_owned(db, song):
            return is_member(db, song.owner_id, user_id)
        return is_admin_or_owner(db, song.owner_id, user_id)

    return False


def can_edit_arrangement(db: Session, arrangement: Arrangement, user_id: int) -> bool:
    if is_original_creator(arrangement, user_id):
        return True

    arrangement_id = arrangement.arrangement_id
    if arrangement.is_group_owned:
        if is_community_owned(db, arrangement):
            return is_member(db, arrangement.owner_id, user_id)
        if is_admin_or_owner(db, arrangement.owner_id, user_id):
            return True
        # 일반 멤버는 해당 편곡의 공동저자일 때만 편집 가능
        return is_member(db, arrangement.owner_id, user_id) and is_arrangement_author(db, arrangement_id, user_id)

    return (
        is_arrangement_collaborator(db, arrangement_id, user_id)
        or is_arrangement_author(db, arrangement_id, user_id)
    )


EDIT_RULES: Dict[ContentType, Callable[[Session, VersionableContent, int], bool]] = {
    ContentType.SONG: can_edit_song,
    ContentType.ARRANGEMENT: can_edit_arrangement,
}


def can_edit(db: Session, content: VersionableContent, user_id: int) -> bool:
    return EDIT_RULES[content.content_type](db, content, user_id)


def can_edit_content(db: Session, content_type: Union[ContentType, str], content_id: int, user_id: int) -> bool:
    content = content_service.get_content(db, content_type, content_id)
    if content is None:
        return False
    return can_edit(db, content, user_id)


def can_access_content_history(db: Session, content: Optional[VersionableContent], user_id: int) -> bool:
    community = resolve_community_group(db)
    if not is_community_owned(db, content, community=community):
        return False
    if is_admin_or_owner(db, community.group_id, user_id):
        return True
    return is_original_creator(content, user_id)


def can_access_version_history(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    user_id: int,
) -> bool:
    """Community 소유 콘텐츠에 한해 Community 관리자 또는 원작자만 이력/롤백에 접근한다.

    편집 권한보다 좁다. 일반 Community 멤버는 편집은 할 수 있어도 이력은 볼 수 없다.
    """
    content = content_service.get_content(db, content_type, content_id)
    return can_access_content_history(db, content, user_id)


def is_content_owner(db: Session, content: VersionableContent, user_id: int) -> bool:
    if content.is_group_owned:
        return is_admin_or_owner(db, content.owner_id, user_id)
    return is_original_creator(content, user_id)


def edit_capabilities(db: Session, content: Optional[VersionableContent], user_id: Optional[int]) -> dict:
    if content is None or user_id is None:
        return {"can_edit": False, "is_owner": False, "is_original_creator": False}
    return {
        "can_edit": can_edit(db, content, user_id),
        "is_owner": is_content_owner(db, content, user_id),
        "is_original_creator": is_original_creator(content, user_id),
    }
