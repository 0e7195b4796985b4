"""사용자 Pydantic 응답 스키마 정의.

User Pydantic response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    """사용자 응답 스키마.

    User response schema. Password hashes never leave the service layer.

    Attributes:
        id: 사용자 UUID (User identifier)
        username: 고유 핸들 (Unique handle)
        full_name: 표시 이름 (Display name, the default mention key)
        email: 이메일 (Email address)
        role: 시스템 역할 (admin | project_manager | member)
        avatar_url: 아바타 URL (Avatar URL)
        is_active: 활성 여부 (Active flag)
    """

    id: str
    username: str
    full_name: str
    email: str
    role: str
    avatar_url: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
