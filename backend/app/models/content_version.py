"""곡/편곡의 변경 이력(append-only)을 저장하는 SQLAlchemy 모델 정의입니다."""

from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship

from app.database import Base


class ContentVersion(Base):
    __tablename__ = "content_versions"

    version_id = Column(Integer, primary_key=True, autoincrement=True)
    content_type = Column(String(20), nullable=False)  # song/arrangement
    content_id = Column(Integer, nullable=False)
    version = Column(Integer, nullable=False)
    snapshot = Column(Text, nullable=False)  # JSON string
    changed_by = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    changed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    change_description = Column(String(200))

    changed_by_user = relationship("User")

    __table_args__ = (
        # 동시 저장으로 같은 번호가 계산되면 덮어쓰지 않고 충돌로 실패한다.
        UniqueConstraint("content_type", "content_id", "version", name="uq_content_version"),
        Index("idx_content_version_entity", "content_type", "content_id", "version"),
    )
