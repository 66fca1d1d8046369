"""Songs 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user
from app.models.content import ContentType
from app.models.user import User
from app.schemas.content import EditCapabilityOut, OwnershipResult
from app.schemas.song import SongCreate, SongOut, SongUpdate, SongWithOwnerOut
from app.services import ownership_service, song_service

router = APIRouter(prefix="/api/songs", tags=["songs"])


@router.post("", response_model=SongOut)
def create_song(
    data: SongCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return song_service.create_song(db, data, current_user)


@router.get("/by-slug/{slug}", response_model=SongWithOwnerOut)
def get_song_by_slug(slug: str, db: Session = Depends(get_db)):
    return song_service.get_song_by_slug_with_owner(db, slug)


@router.get("/{song_id}", response_model=SongWithOwnerOut)
def get_song(song_id: int, db: Session = Depends(get_db)):
    return song_service.get_song_with_owner(db, song_id)


@router.put("/{song_id}", response_model=SongOut)
def update_song(
    song_id: int,
    data: SongUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return song_service.update_song(db, song_id, data, current_user)


@router.get("/{song_id}/can-edit", response_model=EditCapabilityOut)
def can_edit_song(
    song_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return song_service.edit_capabilities(db, song_id, current_user)


@router.post("/{song_id}/transfer", response_model=OwnershipResult)
def transfer_to_community(
    song_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ownership_service.transfer_to_community(db, ContentType.SONG, song_id, current_user)


@router.post("/{song_id}/reclaim", response_model=OwnershipResult)
def reclaim_from_community(
    song_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ownership_service.reclaim_from_community(db, ContentType.SONG, song_id, current_user)
