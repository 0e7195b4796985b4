"""업무 서비스 — 업무 비즈니스 로직.

Task Service — Business logic for tasks: creation with the assignee
notification, detail with comments, project listing and status changes.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.repositories.activity_log_repository import activity_log_repository
from app.repositories.comment_repository import comment_repository
from app.repositories.project_repository import project_repository
from app.repositories.task_repository import task_repository
from app.repositories.user_repository import user_repository
from app.schemas.activity import (
    TaskCreatedDetails,
    TaskCreatedEvent,
    TaskStatusUpdatedDetails,
    TaskStatusUpdatedEvent,
)
from app.schemas.task import TaskCreate, TaskDetailResponse, TaskResponse
from app.services.comment_service import comment_service
from app.services.notification_service import notification_service
from app.utils.exceptions import BadRequestError, NotFoundError, parse_uuid


class TaskService:
    """업무 서비스.

    Task service.
    """

    def build_response(self, task: Task) -> TaskResponse:
        """업무 ORM 객체를 응답 스키마로 변환합니다.

        Convert a task (assignee loaded) to its response.
        """
        return TaskResponse(
            id=str(task.id),
            project_id=str(task.project_id),
            title=task.title,
            description=task.description,
            assigned_to=str(task.assigned_to) if task.assigned_to else None,
            assignee_name=task.assignee.full_name if task.assignee is not None else None,
            created_by=str(task.created_by) if task.created_by else None,
            parent_task_id=str(task.parent_task_id) if task.parent_task_id else None,
            priority=task.priority,
            status=task.status,
            start_date=task.start_date,
            due_date=task.due_date,
            estimated_hours=task.estimated_hours,
            actual_hours=task.actual_hours,
            tags=list(task.tags or []),
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    async def _get_or_404(self, db: AsyncSession, task_id: UUID) -> Task:
        task: Task | None = await task_repository.get_with_context(db, task_id)
        if task is None:
            raise NotFoundError("업무를 찾을 수 없습니다 (Task not found)")
        return task

    async def create_task(
        self,
        db: AsyncSession,
        data: TaskCreate,
        creator: User,
    ) -> TaskResponse:
        """업무를 생성합니다.

        Create a task, record a task_created activity and, when it is
        assigned to someone other than the creator, notify the assignee.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 업무 생성 데이터 (Task creation data)
            creator: 생성자 (Authenticated creator)

        Returns:
            TaskResponse: 생성된 업무 (Created task)

        Raises:
            NotFoundError: 프로젝트/담당자/상위 업무가 없을 때 (Project, assignee or parent task missing)
            BadRequestError: 상위 업무가 다른 프로젝트일 때 (Parent task in another project)
        """
        project_id: UUID = parse_uuid(data.project_id, "project_id")
        project: Project | None = await project_repository.get_by_id(db, project_id)
        if project is None:
            raise NotFoundError("프로젝트를 찾을 수 없습니다 (Project not found)")

        assignee: User | None = None
        if data.assigned_to is not None:
            assignee = await user_repository.get_by_id(db, parse_uuid(data.assigned_to, "assigned_to"))
            if assignee is None or not assignee.is_active:
                raise NotFoundError("담당자를 찾을 수 없습니다 (Assignee not found)")

        parent_task_id: UUID | None = None
        if data.parent_task_id is not None:
            parent_task_id = parse_uuid(data.parent_task_id, "parent_task_id")
            parent: Task | None = await task_repository.get_by_id(db, parent_task_id)
            if parent is None:
                raise NotFoundError("상위 업무를 찾을 수 없습니다 (Parent task not found)")
            if parent.project_id != project_id:
                raise BadRequestError("상위 업무가 다른 프로젝트에 있습니다 (Parent task belongs to another project)")

        task: Task = await task_repository.create(
            db,
            {
                "project_id": project_id,
                "title": data.title,
                "description": data.description,
                "assigned_to": assignee.id if assignee is not None else None,
                "created_by": creator.id,
                "parent_task_id": parent_task_id,
                "priority": data.priority,
                "status": data.status,
                "start_date": data.start_date,
                "due_date": data.due_date,
                "estimated_hours": data.estimated_hours,
                "tags": list(data.tags),
            },
        )

        await activity_log_repository.record(
            db,
            actor_id=creator.id,
            event=TaskCreatedEvent(
                details=TaskCreatedDetails(
                    title=task.title,
                    assigned_to=str(task.assigned_to) if task.assigned_to else None,
                )
            ),
            task_id=task.id,
            project_id=project_id,
        )

        if assignee is not None:
            await notification_service.notify_task_assigned(db, task, project, assignee, creator)

        return self.build_response(await self._get_or_404(db, task.id))

    async def get_task(
        self,
        db: AsyncSession,
        task_id: UUID,
    ) -> TaskDetailResponse:
        """업무 상세를 코멘트와 함께 조회합니다 (Task with its comments)."""
        task: Task = await self._get_or_404(db, task_id)
        comments = await comment_repository.list_for_owner(db, task_id=task_id)
        return TaskDetailResponse(
            **self.build_response(task).model_dump(),
            comments=[comment_service.build_response(c) for c in comments],
        )

    async def list_project_tasks(
        self,
        db: AsyncSession,
        project_id: UUID,
        status: str | None = None,
    ) -> list[TaskResponse]:
        """프로젝트의 업무 목록을 조회합니다 (List a project's tasks)."""
        if await project_repository.get_by_id(db, project_id) is None:
            raise NotFoundError("프로젝트를 찾을 수 없습니다 (Project not found)")
        tasks: list[Task] = await task_repository.list_by_project(db, project_id, status)
        return [self.build_response(t) for t in tasks]

    async def update_status(
        self,
        db: AsyncSession,
        task_id: UUID,
        status: str,
        actor: User,
    ) -> TaskResponse:
        """업무 상태를 변경합니다.

        Change a task's status and record a task_status_updated activity.
        Setting the same status again is a no-op without an activity row.
        """
        task: Task = await self._get_or_404(db, task_id)
        old_status: str = task.status
        if old_status == status:
            return self.build_response(task)

        await task_repository.update(db, task_id, {"status": status})
        await activity_log_repository.record(
            db,
            actor_id=actor.id,
            event=TaskStatusUpdatedEvent(
                details=TaskStatusUpdatedDetails(old_status=old_status, new_status=status)
            ),
            task_id=task_id,
            project_id=task.project_id,
        )
        return self.build_response(await self._get_or_404(db, task_id))


# 싱글턴 인스턴스 — Singleton instance
task_service: TaskService = TaskService()
