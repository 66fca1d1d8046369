"""Arrangement 도메인 서비스 레이어입니다. 편곡 수정과 협업자/공동저자 관리를 담당합니다."""

from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.database import atomic
from app.models.arrangement import Arrangement, ArrangementAuthor, ArrangementCollaborator
from app.models.content import ContentType
from app.models.song import Song
from app.models.user import User
from app.schemas.arrangement import ArrangementCreate, ArrangementUpdate
from app.services import ownership_service, version_service
from app.utils import permissions
from app.utils.errors import InvalidStateError, NotFoundError, PermissionDeniedError


def get_arrangement(db: Session, arrangement_id: int) -> Arrangement:
    arrangement = db.get(Arrangement, arrangement_id)
    if not arrangement:
        raise NotFoundError("편곡을 찾을 수 없습니다.")
    return arrangement


def get_arrangement_with_owner(db: Session, arrangement_id: int) -> Dict[str, Any]:
    arrangement = get_arrangement(db, arrangement_id)
    return {
        "arrangement_id": arrangement.arrangement_id,
        "song_id": arrangement.song_id,
        "name": arrangement.name,
        "key": arrangement.key,
        "tempo": arrangement.tempo,
        "capo": arrangement.capo,
        "time_signature": arrangement.time_signature,
        "chord_pro_content": arrangement.chord_pro_content or "",
        "tags": arrangement.tags or [],
        "slug": arrangement.slug,
        "created_by": arrangement.created_by,
        "owner_type": arrangement.owner_type,
        "owner_id": arrangement.owner_id,
        "created_at": arrangement.created_at,
        "updated_at": arrangement.updated_at,
        "owner": ownership_service.owner_info(db, arrangement),
    }


def create_arrangement(db: Session, data: ArrangementCreate, current_user: User) -> Arrangement:
    if not db.get(Song, data.song_id):
        raise NotFoundError("곡을 찾을 수 없습니다.")
    if db.query(Arrangement.arrangement_id).filter(Arrangement.slug == data.slug).first():
        raise InvalidStateError("같은 slug의 편곡이 이미 있습니다.")
    owner_type, owner_id = ownership_service.resolve_initial_owner(
        db, data.owner_type, data.owner_id, current_user,
    )
    payload = data.model_dump(exclude={"owner_type", "owner_id"})
    with atomic(db):
        arrangement = Arrangement(
            **payload,
            created_by=current_user.user_id,
            owner_type=owner_type,
            owner_id=owner_id,
        )
        db.add(arrangement)
    db.refresh(arrangement)
    return arrangement


def update_arrangement(db: Session, arrangement_id: int, data: ArrangementUpdate, current_user: User) -> Arrangement:
    with atomic(db):
        arrangement = get_arrangement(db, arrangement_id)
        if not permissions.can_edit_arrangement(db, arrangement, current_user.user_id):
            raise PermissionDeniedError("이 편곡을 수정할 권한이 없습니다.")
        version_service.maybe_create_version_snapshot(
            db, ContentType.ARRANGEMENT, arrangement, current_user.user_id,
        )
        arrangement.apply_patch(data.model_dump(exclude_none=True))
    db.refresh(arrangement)
    return arrangement


def edit_capabilities(db: Session, arrangement_id: int, current_user: User) -> Dict[str, bool]:
    arrangement = db.get(Arrangement, arrangement_id)
    return permissions.edit_capabilities(db, arrangement, current_user.user_id)


def _ensure_can_manage_people(db: Session, arrangement: Arrangement, current_user: User) -> None:
    user_id = current_user.user_id
    if permissions.is_original_creator(arrangement, user_id) or permissions.is_content_owner(db, arrangement, user_id):
        return
    raise PermissionDeniedError("원작자 또는 소유 그룹 관리자만 관리할 수 있습니다.")


def _ensure_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("사용자를 찾을 수 없습니다.")
    return user


# ---------------------------------------------------------------------------
# Collaborators (개인 소유 편곡의 편집 협업자)
# ---------------------------------------------------------------------------

def list_collaborators(db: Session, arrangement_id: int) -> List[ArrangementCollaborator]:
    get_arrangement(db, arrangement_id)
    return (
        db.query(ArrangementCollaborator)
        .filter(ArrangementCollaborator.arrangement_id == arrangement_id)
        .order_by(ArrangementCollaborator.collaborator_id.asc())
        .all()
    )


def add_collaborator(db: Session, arrangement_id: int, user_id: int, current_user: User) -> ArrangementCollaborator:
    arrangement = get_arrangement(db, arrangement_id)
    _ensure_can_manage_people(db, arrangement, current_user)
    if arrangement.is_group_owned:
        raise InvalidStateError("그룹 소유 편곡에는 협업자 대신 공동저자를 지정하세요.")
    _ensure_user(db, user_id)
    if permissions.is_original_creator(arrangement, user_id):
        raise InvalidStateError("원작자는 협업자로 추가할 수 없습니다.")
    if permissions.is_arrangement_collaborator(db, arrangement_id, user_id):
        raise InvalidStateError("이미 협업자로 등록된 사용자입니다.")
    with atomic(db):
        row = ArrangementCollaborator(
            arrangement_id=arrangement_id,
            user_id=user_id,
            added_by=current_user.user_id,
        )
        db.add(row)
    db.refresh(row)
    return row


def remove_collaborator(db: Session, arrangement_id: int, user_id: int, current_user: User) -> None:
    arrangement = get_arrangement(db, arrangement_id)
    # 본인은 스스로 협업자에서 빠질 수 있다.
    if current_user.user_id != user_id:
        _ensure_can_manage_people(db, arrangement, current_user)
    row = db.query(ArrangementCollaborator).filter(
        ArrangementCollaborator.arrangement_id == arrangement_id,
        ArrangementCollaborator.user_id == user_id,
    ).first()
    if not row:
        raise NotFoundError("협업자를 찾을 수 없습니다.")
    with atomic(db):
        db.delete(row)


# ---------------------------------------------------------------------------
# Co-authors (저작자 표시 + 그룹 소유 편곡의 편집 권한)
# ---------------------------------------------------------------------------

def list_authors(db: Session, arrangement_id: int) -> List[ArrangementAuthor]:
    get_arrangement(db, arrangement_id)
    return (
        db.query(ArrangementAuthor)
        .filter(ArrangementAuthor.arrangement_id == arrangement_id)
        .order_by(ArrangementAuthor.is_primary.desc(), ArrangementAuthor.author_id.asc())
        .all()
    )


def add_author(
    db: Session,
    arrangement_id: int,
    user_id: int,
    is_primary: bool,
    current_user: User,
) -> ArrangementAuthor:
    arrangement = get_arrangement(db, arrangement_id)
    _ensure_can_manage_people(db, arrangement, current_user)
    _ensure_user(db, user_id)
    if permissions.is_arrangement_author(db, arrangement_id, user_id):
        raise InvalidStateError("이미 공동저자로 등록된 사용자입니다.")
    with atomic(db):
        if is_primary:
            # 대표 저자는 편곡당 한 명
            db.query(ArrangementAuthor).filter(
                ArrangementAuthor.arrangement_id == arrangement_id,
                ArrangementAuthor.is_primary == True,  # noqa: E712
            ).update({ArrangementAuthor.is_primary: False}, synchronize_session=False)
        row = ArrangementAuthor(arrangement_id=arrangement_id, user_id=user_id, is_primary=is_primary)
        db.add(row)
    db.refresh(row)
    return row


def remove_author(db: Session, arrangement_id: int, user_id: int, current_user: User) -> None:
    arrangement = get_arrangement(db, arrangement_id)
    if current_user.user_id != user_id:
        _ensure_can_manage_people(db, arrangement, current_user)
    row = db.query(ArrangementAuthor).filter(
        ArrangementAuthor.arrangement_id == arrangement_id,
        ArrangementAuthor.user_id == user_id,
    ).first()
    if not row:
        raise NotFoundError("공동저자를 찾을 수 없습니다.")
    with atomic(db):
        db.delete(row)
