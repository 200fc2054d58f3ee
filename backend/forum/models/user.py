"""User / UserGroup 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from forum.database import Base
from forum.utils.permissions import PermissionTree


class UserGroup(Base):
    __tablename__ = "user_groups"

    group_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), unique=True, nullable=False)
    display_name = Column(String(100), nullable=False)
    description = Column(Text)
    color = Column(String(7))  # #RRGGBB
    is_default = Column(Boolean, nullable=False, default=False)
    permissions = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="group")

    @property
    def permission_tree(self) -> PermissionTree:
        return PermissionTree(self.permissions or {})

    def has_permission(self, permission: str) -> bool:
        return self.permission_tree.has(permission)

    def get_all_permissions(self) -> list[str]:
        return sorted(self.permission_tree.flatten())


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    group_id = Column(Integer, ForeignKey("user_groups.group_id"), nullable=False)
    signature = Column(Text)
    about = Column(Text)
    is_active = Column(Boolean, default=True)
    is_banned = Column(Boolean, default=False)
    ban_reason = Column(String(500))
    ban_expires_at = Column(DateTime)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    group = relationship("UserGroup", back_populates="users")
    threads = relationship("Thread", back_populates="author")
    posts = relationship("Post", back_populates="author", foreign_keys="Post.user_id")

    def can(self, permission: str) -> bool:
        if self.group is None:
            return False
        return self.group.has_permission(permission)

    @property
    def group_name(self) -> str | None:
        return self.group.name if self.group is not None else None
