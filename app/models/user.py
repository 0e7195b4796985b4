"""사용자 관련 SQLAlchemy ORM 모델 정의.

User SQLAlchemy ORM model definitions.

Tables:
    - users: 사용자 계정 (User accounts; referenced by projects, tasks and comments)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 사용자 역할 값 — Allowed values for User.role
USER_ROLES: tuple[str, ...] = ("admin", "project_manager", "team_lead", "member", "viewer")


class User(Base):
    """사용자 모델 — 시스템 사용자 계정 정보.

    User model — System user account information.
    full_name is the display name and the default mention key;
    username is a stable unique handle usable as an alternative mention key.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        username: 고유 핸들 (Unique handle, immutable by convention)
        full_name: 표시 이름 (Display name, not guaranteed unique)
        email: 이메일 주소 (Email address, unique; login identifier)
        password_hash: bcrypt 해시 (bcrypt password hash)
        role: 역할 (Role, see USER_ROLES)
        avatar_url: 프로필 이미지 URL (Optional avatar URL)
        is_active: 활성 여부 (Inactive users cannot log in or be mentioned)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 고유 핸들 — Stable unique handle
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    # 표시 이름 — Display name (default mention key)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # 이메일 — Email address (login identifier, notification destination)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 비밀번호 해시 — bcrypt hash, never plain text
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 역할 — admin | project_manager | team_lead | member | viewer
    role: Mapped[str] = mapped_column(String(30), nullable=False, default="member")
    # 프로필 이미지 — Optional avatar URL
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 활성 여부 — Soft-disable flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
