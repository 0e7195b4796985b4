"""코멘트 Pydantic 요청/응답 스키마 정의.

Comment Pydantic request/response schema definitions.
"""

from datetime import datetime

from pydantic import BaseModel


class CommentCreate(BaseModel):
    """코멘트 작성 요청 스키마.

    Comment creation request. The service checks that the body is not
    blank and that exactly one of task_id / project_id is set.

    Attributes:
        content: 본문 (Non-empty body, may contain @mentions)
        task_id: 대상 업무 UUID (Owning task)
        project_id: 대상 프로젝트 UUID (Owning project)
        parent_id: 부모 코멘트 UUID (Optional parent in the same scope)
    """

    content: str
    task_id: str | None = None
    project_id: str | None = None
    parent_id: str | None = None


class CommentResponse(BaseModel):
    """코멘트 응답 스키마.

    Comment response with author fields and, for replies, the parent
    author's name and the parent content.
    """

    id: str
    content: str
    task_id: str | None = None
    project_id: str | None = None
    parent_id: str | None = None
    user_id: str
    user_name: str  # 작성자 이름 (Author display name)
    user_email: str  # 작성자 이메일 (Author email)
    user_avatar: str | None = None  # 작성자 아바타 (Author avatar)
    mentioned_user_ids: list[str] = []
    parent_user_name: str | None = None  # 부모 작성자 이름 (Parent author, replies only)
    parent_content: str | None = None  # 부모 본문 (Parent body, replies only)
    created_at: datetime
