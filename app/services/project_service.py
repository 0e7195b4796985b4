"""프로젝트 서비스 — 프로젝트 비즈니스 로직.

Project Service — Business logic for projects and project membership.
"""

import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectMember
from app.models.user import User
from app.repositories.activity_log_repository import activity_log_repository
from app.repositories.project_repository import project_repository
from app.repositories.user_repository import user_repository
from app.schemas.activity import (
    ProjectCreatedDetails,
    ProjectCreatedEvent,
    ProjectMemberAddedDetails,
    ProjectMemberAddedEvent,
)
from app.schemas.project import (
    ProjectCreate,
    ProjectMemberAdd,
    ProjectMemberResponse,
    ProjectResponse,
)
from app.services.notification_service import notification_service
from app.utils.exceptions import DuplicateError, ForbiddenError, NotFoundError, parse_uuid


class ProjectService:
    """프로젝트 서비스.

    Project service.
    """

    def build_response(
        self,
        project: Project,
        my_role: str | None = None,
        task_count: int = 0,
        member_count: int = 0,
    ) -> ProjectResponse:
        """프로젝트 ORM 객체를 응답 스키마로 변환합니다."""
        return ProjectResponse(
            id=str(project.id),
            name=project.name,
            description=project.description,
            project_code=project.project_code,
            start_date=project.start_date,
            end_date=project.end_date,
            budget=project.budget,
            priority=project.priority,
            type=project.type,
            status=project.status,
            created_by=str(project.created_by) if project.created_by else None,
            created_at=project.created_at,
            updated_at=project.updated_at,
            my_role=my_role,
            task_count=task_count,
            member_count=member_count,
        )

    async def get_project(self, db: AsyncSession, project_id: UUID) -> ProjectResponse:
        """프로젝트를 조회합니다 (Retrieve one project)."""
        project: Project | None = await project_repository.get_by_id(db, project_id)
        if project is None:
            raise NotFoundError("프로젝트를 찾을 수 없습니다 (Project not found)")
        return self.build_response(project)

    async def list_projects(self, db: AsyncSession, user: User) -> list[ProjectResponse]:
        """사용자가 생성했거나 멤버인 프로젝트 목록을 조회합니다.

        List projects the user created or is a member of, with counts.
        """
        rows = await project_repository.list_for_user(db, user.id)
        return [
            self.build_response(project, role, task_count, member_count)
            for project, role, task_count, member_count in rows
        ]

    async def create_project(
        self,
        db: AsyncSession,
        data: ProjectCreate,
        creator: User,
    ) -> ProjectResponse:
        """프로젝트를 생성합니다.

        Create a project. Without a code, one is generated from the current
        time in milliseconds. The creator joins as project_manager and a
        project_created activity is recorded.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 프로젝트 생성 데이터 (Project creation data)
            creator: 생성자 (Authenticated creator)

        Returns:
            ProjectResponse: 생성된 프로젝트 (Created project)

        Raises:
            DuplicateError: 프로젝트 코드 중복 (Project code already used)
        """
        code: str = data.project_code or f"PROJ-{int(time.time() * 1000)}"
        if await project_repository.exists(db, {"project_code": code}):
            raise DuplicateError("이미 사용 중인 프로젝트 코드입니다 (Project code already exists)")

        project: Project = await project_repository.create(
            db,
            {
                "name": data.name,
                "description": data.description,
                "project_code": code,
                "start_date": data.start_date,
                "end_date": data.end_date,
                "budget": data.budget,
                "priority": data.priority,
                "type": data.type or "other",
                "created_by": creator.id,
            },
        )
        await project_repository.add_member(db, project.id, creator.id, "project_manager")
        await activity_log_repository.record(
            db,
            actor_id=creator.id,
            event=ProjectCreatedEvent(
                details=ProjectCreatedDetails(project_name=project.name, project_code=code)
            ),
            project_id=project.id,
        )
        return self.build_response(project, "project_manager", 0, 1)

    async def add_member(
        self,
        db: AsyncSession,
        project_id: UUID,
        data: ProjectMemberAdd,
        actor: User,
    ) -> ProjectMemberResponse:
        """프로젝트에 멤버를 추가합니다.

        Add a member. Only an admin, the project's creator or one of its
        project managers may do this. The new member is notified unless
        they added themselves.

        Raises:
            NotFoundError: 프로젝트/사용자가 없을 때 (Project or user missing)
            ForbiddenError: 권한 없음 (Actor may not manage members)
            DuplicateError: 이미 멤버일 때 (Already a member)
        """
        project: Project | None = await project_repository.get_by_id(db, project_id)
        if project is None:
            raise NotFoundError("프로젝트를 찾을 수 없습니다 (Project not found)")

        if actor.role != "admin" and project.created_by != actor.id:
            membership: ProjectMember | None = await project_repository.get_member(db, project_id, actor.id)
            if membership is None or membership.role != "project_manager":
                raise ForbiddenError("프로젝트 멤버를 관리할 권한이 없습니다 (Not allowed to manage project members)")

        user: User | None = await user_repository.get_by_id(db, parse_uuid(data.user_id, "user_id"))
        if user is None or not user.is_active:
            raise NotFoundError("사용자를 찾을 수 없습니다 (User not found)")
        if await project_repository.get_member(db, project_id, user.id) is not None:
            raise DuplicateError("이미 프로젝트 멤버입니다 (User is already a project member)")

        member: ProjectMember = await project_repository.add_member(db, project_id, user.id, data.role)
        await activity_log_repository.record(
            db,
            actor_id=actor.id,
            event=ProjectMemberAddedEvent(
                details=ProjectMemberAddedDetails(user_id=str(user.id), role=data.role)
            ),
            project_id=project_id,
        )
        await notification_service.notify_project_member_added(db, project, user, data.role, actor)

        return ProjectMemberResponse(
            id=str(member.id),
            project_id=str(member.project_id),
            user_id=str(member.user_id),
            role=member.role,
            joined_at=member.joined_at,
        )


# 싱글턴 인스턴스 — Singleton instance
project_service: ProjectService = ProjectService()
