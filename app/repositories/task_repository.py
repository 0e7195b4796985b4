"""업무 레포지토리 — 업무 관련 DB 쿼리 담당.

Task Repository — Handles task database queries.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.task import Task
from app.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """업무 레포지토리.

    Task repository with eager-loaded project/assignee context.

    Extends:
        BaseRepository[Task]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the task repository with Task model.
        """
        super().__init__(Task)

    async def get_with_context(
        self,
        db: AsyncSession,
        task_id: UUID,
    ) -> Task | None:
        """프로젝트와 담당자를 함께 로드하여 업무를 조회합니다.

        Retrieve a task with its project and assignee eager-loaded.
        This is the context the comment fan-out needs (task title,
        project name, assignee contact info).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            task_id: 업무 UUID (Task UUID)

        Returns:
            Task | None: 업무 또는 None (Task or None)
        """
        result = await db.execute(
            select(Task)
            .options(selectinload(Task.project), selectinload(Task.assignee))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_by_project(
        self,
        db: AsyncSession,
        project_id: UUID,
        status: str | None = None,
    ) -> list[Task]:
        """프로젝트의 업무 목록을 조회합니다 (List a project's tasks, oldest first)."""
        query = (
            select(Task)
            .options(selectinload(Task.assignee))
            .where(Task.project_id == project_id)
        )
        if status is not None:
            query = query.where(Task.status == status)
        result = await db.execute(query.order_by(Task.created_at))
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
task_repository: TaskRepository = TaskRepository()
