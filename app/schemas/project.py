"""프로젝트 Pydantic 요청/응답 스키마 정의.

Project Pydantic request/response schema definitions.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class ProjectCreate(BaseModel):
    """프로젝트 생성 요청 스키마.

    Project creation request. A project_code is generated when omitted.

    Attributes:
        name: 프로젝트 이름 (Project name)
        description: 설명 (Optional description)
        project_code: 프로젝트 코드 (Optional unique code)
        start_date / end_date: 기간 (Optional schedule)
        budget: 예산 (Optional budget)
        priority: 우선순위 (low | medium | high | critical)
        type: 유형 (Free-form project type)
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    project_code: str | None = Field(None, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    budget: Decimal | None = None
    priority: str = Field("medium", pattern=r"^(low|medium|high|critical)$")
    type: str | None = None


class ProjectMemberAdd(BaseModel):
    """프로젝트 멤버 추가 요청 스키마 (Add-member request)."""

    user_id: str  # 추가할 사용자 UUID (User to add)
    role: str = Field("member", pattern=r"^(project_manager|member|viewer)$")


class ProjectMemberResponse(BaseModel):
    """프로젝트 멤버 응답 스키마 (Membership response)."""

    id: str
    project_id: str
    user_id: str
    role: str
    joined_at: datetime


class ProjectResponse(BaseModel):
    """프로젝트 응답 스키마.

    Project response. my_role and the counts are filled on list endpoints.
    """

    id: str
    name: str
    description: str | None = None
    project_code: str
    start_date: date | None = None
    end_date: date | None = None
    budget: Decimal | None = None
    priority: str
    type: str | None = None
    status: str
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime
    my_role: str | None = None  # 현재 사용자 역할 (Current user's project role)
    task_count: int = 0  # 업무 수 (Number of tasks)
    member_count: int = 0  # 멤버 수 (Number of members)
