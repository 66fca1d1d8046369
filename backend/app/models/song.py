"""Song 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.content import ContentType, VersionableContent
from app.schemas.version import SongSnapshot


class Song(VersionableContent, Base):
    __tablename__ = "songs"

    content_type = ContentType.SONG
    snapshot_class = SongSnapshot
    pk_name = "song_id"

    song_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    artist = Column(String(200))
    themes = Column(JSON, default=list)
    copyright = Column(Text)
    lyrics = Column(Text)
    origin = Column(String(100))
    slug = Column(String(200), unique=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    owner_type = Column(String(10))  # NULL(개인)/group
    owner_id = Column(Integer, ForeignKey("groups.group_id"))
    version_counter = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    creator = relationship("User", back_populates="songs")
    owner_group = relationship("Group")
    arrangements = relationship("Arrangement", back_populates="song")

    __table_args__ = (
        Index("idx_song_owner", "owner_type", "owner_id"),
        Index("idx_song_created_by", "created_by"),
    )
