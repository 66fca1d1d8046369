"""Community 소유 콘텐츠의 버전 이력 저장/조회/롤백을 제공하는 도메인 서비스입니다.

이력은 append-only다. 한 번 기록된 버전은 수정하거나 삭제하지 않으며,
롤백도 과거 상태를 새 버전으로 다시 쌓는 방식으로 처리한다.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings
from app.database import atomic
from app.models.content import ContentType, VersionableContent
from app.models.content_version import ContentVersion
from app.models.user import User
from app.services import content_service
from app.utils.helpers import format_user_info
from app.utils import permissions
from app.utils.errors import InvalidStateError, NotFoundError, PermissionDeniedError

logger = logging.getLogger(__name__)

ROLLBACK_PREPARATION_DESCRIPTION = "Rollback preparation (before rollback to v{version})"
ROLLED_BACK_DESCRIPTION = "Rolled back to version {version}"


def snapshot_of(content: VersionableContent) -> BaseModel:
    return content.snapshot_fields()


def serialize_snapshot(snapshot: BaseModel) -> str:
    return json.dumps(snapshot.model_dump(), ensure_ascii=False, sort_keys=True)


def parse_snapshot(row: ContentVersion) -> BaseModel:
    snapshot_class = content_service.CONTENT_MODELS[ContentType(row.content_type)].snapshot_class
    try:
        return snapshot_class.model_validate(json.loads(row.snapshot or "{}"))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise InvalidStateError(f"버전 {row.version}의 스냅샷을 읽을 수 없습니다.") from exc


def _key_filter(content_type: Union[ContentType, str], content_id: int):
    return (
        ContentVersion.content_type == ContentType(content_type).value,
        ContentVersion.content_id == content_id,
    )


def current_max_version(db: Session, content_type: Union[ContentType, str], content_id: int) -> int:
    current_max = (
        db.query(func.max(ContentVersion.version))
        .filter(*_key_filter(content_type, content_id))
        .scalar()
    )
    return current_max or 0


def next_version(db: Session, content: VersionableContent) -> int:
    """콘텐츠 행의 version_counter를 원자적으로 올려 다음 버전 번호를 예약한다.

    UPDATE가 콘텐츠 행에 쓰기 잠금을 잡으므로 같은 콘텐츠에 대한 동시 저장은 직렬화된다.
    카운터가 기존 이력보다 뒤처져 있으면(카운터 도입 이전 데이터) max+1로 맞춘다.
    호출자의 트랜잭션 안에서만 사용해야 한다.
    """
    model = type(content)
    pk = getattr(model, content.pk_name)
    db.query(model).filter(pk == content.content_id).update(
        {model.version_counter: model.version_counter + 1},
        synchronize_session=False,
    )
    counter = db.query(model.version_counter).filter(pk == content.content_id).scalar()
    existing_max = current_max_version(db, content.content_type, content.content_id)
    if counter <= existing_max:
        counter = existing_max + 1
        db.query(model).filter(pk == content.content_id).update(
            {model.version_counter: counter},
            synchronize_session=False,
        )
    db.expire(content, ["version_counter"])
    return counter


def latest_version(db: Session, content_type: Union[ContentType, str], content_id: int) -> Optional[ContentVersion]:
    return (
        db.query(ContentVersion)
        .filter(*_key_filter(content_type, content_id))
        .order_by(ContentVersion.version.desc())
        .first()
    )


def create_content_version(
    db: Session,
    *,
    content: VersionableContent,
    changed_by: int,
    change_description: Optional[str] = None,
    snapshot: Optional[BaseModel] = None,
) -> ContentVersion:
    """소유권 확인 없이 버전을 하나 추가한다. commit은 호출자가 한다."""
    if snapshot is None:
        snapshot = snapshot_of(content)
    row = ContentVersion(
        content_type=content.content_type.value,
        content_id=content.content_id,
        version=next_version(db, content),
        snapshot=serialize_snapshot(snapshot),
        changed_by=changed_by,
        changed_at=datetime.utcnow(),
        change_description=change_description,
    )
    db.add(row)
    db.flush()
    logger.info(
        "[versions] %s:%s v%s recorded by user=%s (%s)",
        row.content_type, row.content_id, row.version, changed_by, change_description or "edit",
    )
    return row


def has_content_changed(db: Session, content: VersionableContent, snapshot: BaseModel) -> bool:
    latest = latest_version(db, content.content_type, content.content_id)
    if latest is None:
        return True
    try:
        return parse_snapshot(latest) != snapshot
    except InvalidStateError:
        # 손상된 마지막 스냅샷은 변경된 것으로 간주하고 새 버전을 남긴다.
        return True


def maybe_create_version_snapshot(
    db: Session,
    content_type: Union[ContentType, str],
    content: VersionableContent,
    user_id: int,
) -> Optional[ContentVersion]:
    """수정 직전 상태를 Community 소유 콘텐츠에 한해, 내용이 바뀐 경우에만 기록한다.

    저장 버튼만 반복해서 누르는 경우 이력이 쌓이지 않도록 마지막 버전과 비교한다.
    update 서비스가 patch를 적용하기 전에 같은 트랜잭션 안에서 호출한다.
    """
    if ContentType(content_type) != content.content_type:
        raise InvalidStateError("콘텐츠 종류가 일치하지 않습니다.")
    if not permissions.is_community_owned(db, content):
        return None

    snapshot = snapshot_of(content)
    if not has_content_changed(db, content, snapshot):
        return None
    return create_content_version(db, content=content, changed_by=user_id, snapshot=snapshot)


def list_versions(db: Session, content_type: Union[ContentType, str], content_id: int) -> List[ContentVersion]:
    return (
        db.query(ContentVersion)
        .filter(*_key_filter(content_type, content_id))
        .order_by(ContentVersion.version.desc())
        .all()
    )


def get_version(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    version: int,
) -> Optional[ContentVersion]:
    return (
        db.query(ContentVersion)
        .filter(*_key_filter(content_type, content_id), ContentVersion.version == version)
        .first()
    )


def get_history(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    user_id: int,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    if not permissions.can_access_version_history(db, content_type, content_id, user_id):
        return []

    query = (
        db.query(ContentVersion, User)
        .outerjoin(User, User.user_id == ContentVersion.changed_by)
        .filter(*_key_filter(content_type, content_id))
        .order_by(ContentVersion.version.desc())
    )
    if limit is not None and limit > 0:
        query = query.limit(min(limit, settings.VERSION_HISTORY_MAX_LIMIT))
    return [to_response(row, user) for row, user in query.all()]


def get_accessible_version(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    version: int,
    user_id: int,
) -> Optional[Dict[str, Any]]:
    if not permissions.can_access_version_history(db, content_type, content_id, user_id):
        return None
    row = get_version(db, content_type, content_id, version)
    if row is None:
        return None
    return to_response(row, db.get(User, row.changed_by))


def rollback(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
    target_version: int,
    user_id: int,
) -> Dict[str, Any]:
    """대상 버전으로 되돌리고 이력을 두 건(롤백 직전 상태, 롤백 결과) 추가한다."""
    content_type = ContentType(content_type)
    with atomic(db):
        content = content_service.require_content(db, content_type, content_id)
        # Community 소유가 아니면 이력 접근 권한도 없으므로 같은 403으로 처리한다.
        if not permissions.can_access_content_history(db, content, user_id):
            logger.warning(
                "[versions] rollback denied: %s:%s user=%s", content_type.value, content_id, user_id,
            )
            raise PermissionDeniedError("Community 소유 콘텐츠에 대해 Community 관리자 또는 원작자만 롤백할 수 있습니다.")

        target = get_version(db, content_type, content_id, target_version)
        if target is None:
            raise NotFoundError("버전 이력을 찾을 수 없습니다.")
        target_snapshot = parse_snapshot(target)

        create_content_version(
            db,
            content=content,
            changed_by=user_id,
            change_description=ROLLBACK_PREPARATION_DESCRIPTION.format(version=target_version),
        )
        content.apply_snapshot(target_snapshot)
        db.flush()
        restored = create_content_version(
            db,
            content=content,
            changed_by=user_id,
            change_description=ROLLED_BACK_DESCRIPTION.format(version=target_version),
            snapshot=target_snapshot,
        )
        latest = restored.version

    logger.info(
        "[versions] %s:%s rolled back to v%s by user=%s", content_type.value, content_id, target_version, user_id,
    )
    return {
        "success": True,
        "content_type": content_type.value,
        "content_id": content_id,
        "restored_version": target_version,
        "latest_version": latest,
    }


def to_response(row: ContentVersion, user: Optional[User] = None) -> Dict[str, Any]:
    try:
        snapshot = json.loads(row.snapshot or "{}")
    except json.JSONDecodeError:
        snapshot = {}
    return {
        "version_id": row.version_id,
        "content_type": row.content_type,
        "content_id": row.content_id,
        "version": row.version,
        "snapshot": snapshot,
        "changed_by": row.changed_by,
        "changed_by_user": format_user_info(user),
        "changed_at": row.changed_at,
        "change_description": row.change_description,
    }
