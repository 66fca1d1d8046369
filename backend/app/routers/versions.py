"""Versions 기능 API 라우터입니다. Community 콘텐츠의 이력 조회와 롤백을 서비스 레이어로 위임합니다."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.content import ContentType
from app.models.user import User
from app.schemas.group import CommunityModeratorOut
from app.schemas.version import ContentVersionOut, RollbackResult, VersionAccessOut
from app.services import version_service
from app.utils import permissions
from app.utils.errors import NotFoundError

router = APIRouter(prefix="/api/versions", tags=["versions"])


@router.get("/moderator", response_model=CommunityModeratorOut)
def is_current_user_community_moderator(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"is_moderator": permissions.is_community_moderator(db, current_user.user_id)}


@router.get("/{content_type}/{content_id}", response_model=List[ContentVersionOut])
def get_history(
    content_type: ContentType,
    content_id: int,
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # 권한이 없으면 오류 대신 빈 목록을 돌려준다.
    return version_service.get_history(db, content_type, content_id, current_user.user_id, limit=limit)


@router.get("/{content_type}/{content_id}/can-access", response_model=VersionAccessOut)
def can_access_history(
    content_type: ContentType,
    content_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {
        "can_access": permissions.can_access_version_history(db, content_type, content_id, current_user.user_id),
    }


@router.get("/{content_type}/{content_id}/{version}", response_model=ContentVersionOut)
def get_version(
    content_type: ContentType,
    content_id: int,
    version: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = version_service.get_accessible_version(db, content_type, content_id, version, current_user.user_id)
    if row is None:
        raise NotFoundError("버전 이력을 찾을 수 없습니다.")
    return row


@router.post("/{content_type}/{content_id}/rollback/{version}", response_model=RollbackResult)
def rollback(
    content_type: ContentType,
    content_id: int,
    version: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return version_service.rollback(db, content_type, content_id, version, current_user.user_id)
