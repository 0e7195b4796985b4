"""코멘트 레포지토리 — 코멘트 관련 DB 쿼리 담당.

Comment Repository — Handles comment database queries.
Comments are insert-only; reads join author display fields and,
for replies, the parent's author and content.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.comment import Comment
from app.repositories.base import BaseRepository


class CommentRepository(BaseRepository[Comment]):
    """코멘트 레포지토리.

    Comment repository.

    Extends:
        BaseRepository[Comment]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the comment repository with Comment model.
        """
        super().__init__(Comment)

    async def create_comment(
        self,
        db: AsyncSession,
        content: str,
        user_id: UUID,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        parent_id: UUID | None = None,
        mentioned_user_ids: list[UUID] | None = None,
    ) -> Comment:
        """새 코멘트를 생성합니다.

        Insert a comment row. mentioned_user_ids keeps its order and is
        stored as a JSON array of UUID strings.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            content: 본문 (Comment body)
            user_id: 작성자 UUID (Author UUID)
            task_id: 대상 업무 UUID (Owning task, xor project_id)
            project_id: 대상 프로젝트 UUID (Owning project, xor task_id)
            parent_id: 부모 코멘트 UUID (Optional parent)
            mentioned_user_ids: 멘션된 사용자 목록 (Resolved mentions)

        Returns:
            Comment: 생성된 코멘트 (Created comment)
        """
        comment: Comment = Comment(
            content=content,
            user_id=user_id,
            task_id=task_id,
            project_id=project_id,
            parent_id=parent_id,
            mentioned_user_ids=[str(uid) for uid in (mentioned_user_ids or [])],
        )
        db.add(comment)
        await db.flush()
        await db.refresh(comment)
        return comment

    async def get_detail(
        self,
        db: AsyncSession,
        comment_id: UUID,
    ) -> Comment | None:
        """작성자와 부모 코멘트를 함께 로드하여 조회합니다.

        Retrieve a comment with its author and parent (with parent author) loaded.
        """
        result = await db.execute(
            select(Comment)
            .options(
                selectinload(Comment.author),
                selectinload(Comment.parent).selectinload(Comment.author),
            )
            .where(Comment.id == comment_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_owner(
        self,
        db: AsyncSession,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
    ) -> list[Comment]:
        """업무 또는 프로젝트의 코멘트를 작성순으로 조회합니다.

        List comments on one task or one project in creation order.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            task_id: 업무 UUID (Task scope)
            project_id: 프로젝트 UUID (Project scope)

        Returns:
            list[Comment]: 코멘트 목록 (Comments, oldest first)
        """
        query: Select = select(Comment).options(
            selectinload(Comment.author),
            selectinload(Comment.parent).selectinload(Comment.author),
        )
        if task_id is not None:
            query = query.where(Comment.task_id == task_id)
        else:
            query = query.where(Comment.project_id == project_id)
        result = await db.execute(query.order_by(Comment.created_at, Comment.id))
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
comment_repository: CommentRepository = CommentRepository()
