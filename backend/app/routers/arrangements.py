"""Arrangements 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.content import ContentType
from app.models.user import User
from app.schemas.arrangement import (
    ArrangementCreate,
    ArrangementOut,
    ArrangementUpdate,
    ArrangementWithOwnerOut,
    AuthorAdd,
    AuthorOut,
    CollaboratorAdd,
    CollaboratorOut,
)
from app.schemas.content import EditCapabilityOut, OwnershipResult
from app.services import arrangement_service, ownership_service

router = APIRouter(prefix="/api/arrangements", tags=["arrangements"])


@router.post("", response_model=ArrangementOut)
def create_arrangement(
    data: ArrangementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return arrangement_service.create_arrangement(db, data, current_user)


@router.get("/{arrangement_id}", response_model=ArrangementWithOwnerOut)
def get_arrangement(arrangement_id: int, db: Session = Depends(get_db)):
    return arrangement_service.get_arrangement_with_owner(db, arrangement_id)


@router.put("/{arrangement_id}", response_model=ArrangementOut)
def update_arrangement(
    arrangement_id: int,
    data: ArrangementUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return arrangement_service.update_arrangement(db, arrangement_id, data, current_user)


@router.get("/{arrangement_id}/can-edit", response_model=EditCapabilityOut)
def can_edit_arrangement(
    arrangement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return arrangement_service.edit_capabilities(db, arrangement_id, current_user)


@router.post("/{arrangement_id}/transfer", response_model=OwnershipResult)
def transfer_to_community(
    arrangement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ownership_service.transfer_to_community(db, ContentType.ARRANGEMENT, arrangement_id, current_user)


@router.post("/{arrangement_id}/reclaim", response_model=OwnershipResult)
def reclaim_from_community(
    arrangement_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ownership_service.reclaim_from_community(db, ContentType.ARRANGEMENT, arrangement_id, current_user)


@router.get("/{arrangement_id}/collaborators", response_model=List[CollaboratorOut])
def list_collaborators(arrangement_id: int, db: Session = Depends(get_db)):
    return arrangement_service.list_collaborators(db, arrangement_id)


@router.post("/{arrangement_id}/collaborators", response_model=CollaboratorOut)
def add_collaborator(
    arrangement_id: int,
    data: CollaboratorAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return arrangement_service.add_collaborator(db, arrangement_id, data.user_id, current_user)


@router.delete("/{arrangement_id}/collaborators/{user_id}")
def remove_collaborator(
    arrangement_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    arrangement_service.remove_collaborator(db, arrangement_id, user_id, current_user)
    return {"message": "삭제되었습니다."}


@router.get("/{arrangement_id}/authors", response_model=List[AuthorOut])
def list_authors(arrangement_id: int, db: Session = Depends(get_db)):
    return arrangement_service.list_authors(db, arrangement_id)


@router.post("/{arrangement_id}/authors", response_model=AuthorOut)
def add_author(
    arrangement_id: int,
    data: AuthorAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return arrangement_service.add_author(db, arrangement_id, data.user_id, data.is_primary, current_user)


@router.delete("/{arrangement_id}/authors/{user_id}")
def remove_author(
    arrangement_id: int,
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    arrangement_service.remove_author(db, arrangement_id, user_id, current_user)
    return {"message": "삭제되었습니다."}
