"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from app.models.user import User
from app.models.group import Group, GroupJoinRequest, GroupMember
from app.models.song import Song
from app.models.arrangement import Arrangement, ArrangementCollaborator, ArrangementAuthor
from app.models.content_version import ContentVersion

__all__ = [
    "User",
    "Group", "GroupMember", "GroupJoinRequest",
    "Song",
    "Arrangement", "ArrangementCollaborator", "ArrangementAuthor",
    "ContentVersion",
]
