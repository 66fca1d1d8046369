"""Song 도메인 서비스 레이어입니다. 편집 권한 확인 → 이력 스냅샷 → 변경 적용 순서를 캡슐화합니다."""

from typing import Any, Dict

from sqlalchemy.orm import Session

from app.database import atomic
from app.models.content import ContentType
from app.models.song import Song
from app.models.user import User
from app.schemas.song import SongCreate, SongUpdate
from app.services import ownership_service, version_service
from app.utils import permissions
from app.utils.errors import InvalidStateError, NotFoundError, PermissionDeniedError


def get_song(db: Session, song_id: int) -> Song:
    song = db.get(Song, song_id)
    if not song:
        raise NotFoundError("곡을 찾을 수 없습니다.")
    return song


def get_song_with_owner(db: Session, song_id: int) -> Dict[str, Any]:
    song = get_song(db, song_id)
    return _with_owner(db, song)


def get_song_by_slug_with_owner(db: Session, slug: str) -> Dict[str, Any]:
    song = db.query(Song).filter(Song.slug == slug).first()
    if not song:
        raise NotFoundError("곡을 찾을 수 없습니다.")
    return _with_owner(db, song)


def _with_owner(db: Session, song: Song) -> Dict[str, Any]:
    return {
        "song_id": song.song_id,
        "title": song.title,
        "artist": song.artist,
        "themes": song.themes or [],
        "copyright": song.copyright,
        "lyrics": song.lyrics,
        "origin": song.origin,
        "slug": song.slug,
        "created_by": song.created_by,
        "owner_type": song.owner_type,
        "owner_id": song.owner_id,
        "created_at": song.created_at,
        "updated_at": song.updated_at,
        "owner": ownership_service.owner_info(db, song),
    }


def create_song(db: Session, data: SongCreate, current_user: User) -> Song:
    if db.query(Song.song_id).filter(Song.slug == data.slug).first():
        raise InvalidStateError("같은 slug의 곡이 이미 있습니다.")
    owner_type, owner_id = ownership_service.resolve_initial_owner(
        db, data.owner_type, data.owner_id, current_user,
    )
    payload = data.model_dump(exclude={"owner_type", "owner_id"})
    with atomic(db):
        song = Song(
            **payload,
            created_by=current_user.user_id,
            owner_type=owner_type,
            owner_id=owner_id,
        )
        db.add(song)
    db.refresh(song)
    return song


def update_song(db: Session, song_id: int, data: SongUpdate, current_user: User) -> Song:
    with atomic(db):
        song = get_song(db, song_id)
        if not permissions.can_edit_song(db, song, current_user.user_id):
            raise PermissionDeniedError("이 곡을 수정할 권한이 없습니다.")
        # Community 소유 곡은 수정 전 상태를 이력으로 남긴다(내용이 바뀐 경우만).
        version_service.maybe_create_version_snapshot(db, ContentType.SONG, song, current_user.user_id)
        song.apply_patch(data.model_dump(exclude_none=True))
    db.refresh(song)
    return song


def edit_capabilities(db: Session, song_id: int, current_user: User) -> Dict[str, bool]:
    song = db.get(Song, song_id)
    return permissions.edit_capabilities(db, song, current_user.user_id)
