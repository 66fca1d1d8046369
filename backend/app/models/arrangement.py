"""Arrangement(편곡) 및 협업자/공동저자 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.content import ContentType, VersionableContent
from app.schemas.version import ArrangementSnapshot


class Arrangement(VersionableContent, Base):
    __tablename__ = "arrangements"

    content_type = ContentType.ARRANGEMENT
    snapshot_class = ArrangementSnapshot
    pk_name = "arrangement_id"

    arrangement_id = Column(Integer, primary_key=True, autoincrement=True)
    song_id = Column(Integer, ForeignKey("songs.song_id"), nullable=False)
    name = Column(String(200), nullable=False)
    key = Column(String(10))
    tempo = Column(Integer)
    capo = Column(Integer)
    time_signature = Column(String(10))
    chord_pro_content = Column(Text, nullable=False, default="")
    tags = Column(JSON, default=list)
    slug = Column(String(200), unique=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    owner_type = Column(String(10))  # NULL(개인)/group
    owner_id = Column(Integer, ForeignKey("groups.group_id"))
    version_counter = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    song = relationship("Song", back_populates="arrangements")
    creator = relationship("User", back_populates="arrangements")
    owner_group = relationship("Group")
    collaborators = relationship("ArrangementCollaborator", back_populates="arrangement", cascade="all, delete-orphan")
    authors = relationship("ArrangementAuthor", back_populates="arrangement", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_arrangement_song", "song_id"),
        Index("idx_arrangement_owner", "owner_type", "owner_id"),
    )


class ArrangementCollaborator(Base):
    __tablename__ = "arrangement_collaborators"

    collaborator_id = Column(Integer, primary_key=True, autoincrement=True)
    arrangement_id = Column(Integer, ForeignKey("arrangements.arrangement_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    added_by = Column(Integer, ForeignKey("users.user_id"))
    added_at = Column(DateTime, server_default=func.now())

    arrangement = relationship("Arrangement", back_populates="collaborators")
    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        UniqueConstraint("arrangement_id", "user_id", name="uq_arrangement_collaborator"),
    )

    @property
    def username(self):
        return self.user.username if self.user else None


class ArrangementAuthor(Base):
    __tablename__ = "arrangement_authors"

    author_id = Column(Integer, primary_key=True, autoincrement=True)
    arrangement_id = Column(Integer, ForeignKey("arrangements.arrangement_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    is_primary = Column(Boolean, default=False)
    added_at = Column(DateTime, server_default=func.now())

    arrangement = relationship("Arrangement", back_populates="authors")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("arrangement_id", "user_id", name="uq_arrangement_author"),
    )

    @property
    def username(self):
        return self.user.username if self.user else None
