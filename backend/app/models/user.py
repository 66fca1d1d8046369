"""User 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), unique=True, nullable=False)
    name = Column(String(100))  # 실명. show_real_name=True일 때만 노출
    display_name = Column(String(100))
    show_real_name = Column(Boolean, default=False)
    email = Column(String(200))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    group_memberships = relationship("GroupMember", back_populates="user")
    songs = relationship("Song", back_populates="creator")
    arrangements = relationship("Arrangement", back_populates="creator")
