"""활동 로그 레포지토리 — 활동 기록 DB 쿼리 담당.

Activity Log Repository — Append and list activity rows.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.repositories.base import BaseRepository
from app.schemas.activity import ActivityEvent


class ActivityLogRepository(BaseRepository[ActivityLog]):
    """활동 로그 레포지토리.

    Activity log repository. Rows are only ever appended.

    Extends:
        BaseRepository[ActivityLog]
    """

    def __init__(self) -> None:
        super().__init__(ActivityLog)

    async def record(
        self,
        db: AsyncSession,
        actor_id: UUID,
        event: ActivityEvent,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
    ) -> ActivityLog:
        """태그된 이벤트를 활동 로그에 기록합니다.

        Append one activity row from a tagged event payload.
        The event's tag becomes the action column; its details and
        optional meta parts become the JSON columns.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor_id: 행위자 UUID (Actor UUID)
            event: 태그된 이벤트 (Tagged event payload)
            task_id: 대상 업무 UUID (Optional task scope)
            project_id: 대상 프로젝트 UUID (Optional project scope)

        Returns:
            ActivityLog: 생성된 로그 (Created row)
        """
        dumped: dict = event.model_dump(mode="json")
        log: ActivityLog = ActivityLog(
            user_id=actor_id,
            task_id=task_id,
            project_id=project_id,
            action=dumped["action"],
            details=dumped["details"],
            meta=dumped.get("meta"),
        )
        db.add(log)
        await db.flush()
        await db.refresh(log)
        return log

    async def list_for_scope(
        self,
        db: AsyncSession,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
        limit: int = 100,
    ) -> list[ActivityLog]:
        """업무 또는 프로젝트의 활동 로그를 최신순으로 조회합니다.

        List activity rows for a task or a project, newest first.
        """
        query = select(ActivityLog)
        if task_id is not None:
            query = query.where(ActivityLog.task_id == task_id)
        else:
            query = query.where(ActivityLog.project_id == project_id)
        result = await db.execute(query.order_by(ActivityLog.created_at.desc()).limit(limit))
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
activity_log_repository: ActivityLogRepository = ActivityLogRepository()
