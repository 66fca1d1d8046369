"""콘텐츠 종류(곡/편곡)별 모델 조회를 한곳에서 처리하는 서비스입니다."""

from typing import Dict, Optional, Type, Union

from sqlalchemy.orm import Session

from app.models.arrangement import Arrangement
from app.models.content import ContentType, VersionableContent
from app.models.song import Song
from app.utils.errors import NotFoundError

CONTENT_MODELS: Dict[ContentType, Type[VersionableContent]] = {
    ContentType.SONG: Song,
    ContentType.ARRANGEMENT: Arrangement,
}

NOT_FOUND_MESSAGES = {
    ContentType.SONG: "곡을 찾을 수 없습니다.",
    ContentType.ARRANGEMENT: "편곡을 찾을 수 없습니다.",
}


def get_content(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
) -> Optional[VersionableContent]:
    model = CONTENT_MODELS[ContentType(content_type)]
    return db.get(model, content_id)


def require_content(
    db: Session,
    content_type: Union[ContentType, str],
    content_id: int,
) -> VersionableContent:
    content = get_content(db, content_type, content_id)
    if content is None:
        raise NotFoundError(NOT_FOUND_MESSAGES[ContentType(content_type)])
    return content
