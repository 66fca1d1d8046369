"""Group/GroupMember/가입 요청 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


ROLE_OWNER = "owner"
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

MANAGER_ROLES = (ROLE_OWNER, ROLE_ADMIN)

JOIN_POLICY_OPEN = "open"
JOIN_POLICY_APPROVAL = "approval"

REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"


class Group(Base):
    __tablename__ = "groups"

    group_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False)
    description = Column(Text)
    join_policy = Column(String(20), default=JOIN_POLICY_APPROVAL)  # open/approval
    is_system_group = Column(Boolean, nullable=False, default=False)
    created_by = Column(Integer, ForeignKey("users.user_id"))
    created_at = Column(DateTime, server_default=func.now())

    members = relationship("GroupMember", back_populates="group", cascade="all, delete-orphan")

    __table_args__ = (
        # 시스템 그룹(Community)은 최대 1개. 조회도 이 인덱스를 탄다.
        Index(
            "uq_groups_system_group",
            "is_system_group",
            unique=True,
            sqlite_where=text("is_system_group = 1"),
            postgresql_where=text("is_system_group"),
        ),
    )


class GroupMember(Base):
    __tablename__ = "group_members"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_MEMBER)  # owner/admin/member
    promoted_at = Column(DateTime)
    joined_at = Column(DateTime, server_default=func.now())

    group = relationship("Group", back_populates="members")
    user = relationship("User", back_populates="group_memberships")

    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member"),
    )

    @property
    def username(self):
        return self.user.username if self.user else None


class GroupJoinRequest(Base):
    __tablename__ = "group_join_requests"

    request_id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.group_id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=REQUEST_PENDING)  # pending/approved/rejected
    requested_at = Column(DateTime, server_default=func.now())
    resolved_by = Column(Integer, ForeignKey("users.user_id"))
    resolved_at = Column(DateTime)

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        Index("idx_join_request_group_status", "group_id", "status"),
        Index("idx_join_request_user", "user_id"),
    )

    @property
    def username(self):
        return self.user.username if self.user else None
