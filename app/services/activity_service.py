"""활동 로그 서비스 — 활동 로그 조회.

Activity Service — Reads activity rows back as tagged event payloads.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.activity_log import ActivityLog
from app.repositories.activity_log_repository import activity_log_repository
from app.schemas.activity import ActivityResponse, activity_event_adapter


class ActivityService:
    """활동 로그 서비스 (Activity log service)."""

    def to_response(self, log: ActivityLog) -> ActivityResponse:
        """로그 행을 태그된 이벤트 응답으로 변환합니다.

        Parse the stored action, details and meta back into their variant.
        """
        event = activity_event_adapter.validate_python(
            {"action": log.action, "details": log.details or {}, "meta": log.meta}
        )
        return ActivityResponse(
            id=str(log.id),
            user_id=str(log.user_id) if log.user_id else None,
            task_id=str(log.task_id) if log.task_id else None,
            project_id=str(log.project_id) if log.project_id else None,
            event=event,
            created_at=log.created_at,
        )

    async def list_activity(
        self,
        db: AsyncSession,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
    ) -> list[ActivityResponse]:
        """업무 또는 프로젝트의 활동 로그를 조회합니다 (Newest first)."""
        logs: list[ActivityLog] = await activity_log_repository.list_for_scope(
            db, task_id=task_id, project_id=project_id
        )
        return [self.to_response(log) for log in logs]


# 싱글턴 인스턴스 — Singleton instance
activity_service: ActivityService = ActivityService()
