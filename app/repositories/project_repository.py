"""프로젝트 레포지토리 — 프로젝트 및 멤버 관련 DB 쿼리 담당.

Project Repository — Handles project and membership database queries.
"""

from uuid import UUID

from sqlalchemy import Select, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.project import Project, ProjectMember
from app.models.task import Task
from app.repositories.base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """프로젝트 레포지토리.

    Project repository with membership management and per-user listing.

    Extends:
        BaseRepository[Project]
    """

    def __init__(self) -> None:
        """레포지토리를 초기화합니다.

        Initialize the project repository with Project model.
        """
        super().__init__(Project)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> list[tuple[Project, str | None, int, int]]:
        """사용자가 생성했거나 멤버인 프로젝트 목록을 조회합니다.

        List projects the user created or belongs to, most recently updated
        first, with the user's project role, task count and member count.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)

        Returns:
            list[tuple[Project, str | None, int, int]]:
                (프로젝트, 내 역할, 업무 수, 멤버 수)
                (project, user's role, task count, member count)
        """
        my_membership = (
            select(ProjectMember.project_id, ProjectMember.role)
            .where(ProjectMember.user_id == user_id)
            .subquery()
        )
        task_counts = (
            select(Task.project_id, func.count(distinct(Task.id)).label("task_count"))
            .group_by(Task.project_id)
            .subquery()
        )
        member_counts = (
            select(ProjectMember.project_id, func.count(distinct(ProjectMember.user_id)).label("member_count"))
            .group_by(ProjectMember.project_id)
            .subquery()
        )
        query: Select = (
            select(
                Project,
                my_membership.c.role,
                func.coalesce(task_counts.c.task_count, 0),
                func.coalesce(member_counts.c.member_count, 0),
            )
            .outerjoin(my_membership, my_membership.c.project_id == Project.id)
            .outerjoin(task_counts, task_counts.c.project_id == Project.id)
            .outerjoin(member_counts, member_counts.c.project_id == Project.id)
            .where(or_(my_membership.c.project_id.is_not(None), Project.created_by == user_id))
            .order_by(Project.updated_at.desc())
        )
        result = await db.execute(query)
        return [(row[0], row[1], int(row[2]), int(row[3])) for row in result.all()]

    async def get_member(
        self,
        db: AsyncSession,
        project_id: UUID,
        user_id: UUID,
    ) -> ProjectMember | None:
        """프로젝트 멤버십을 조회합니다 (Retrieve one membership row)."""
        result = await db.execute(
            select(ProjectMember).where(
                ProjectMember.project_id == project_id,
                ProjectMember.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add_member(
        self,
        db: AsyncSession,
        project_id: UUID,
        user_id: UUID,
        role: str,
    ) -> ProjectMember:
        """프로젝트에 멤버를 추가합니다.

        Add a member to a project.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            project_id: 프로젝트 UUID (Project UUID)
            user_id: 사용자 UUID (User UUID)
            role: 프로젝트 내 역할 (Project role)

        Returns:
            ProjectMember: 생성된 멤버십 (Created membership)
        """
        member: ProjectMember = ProjectMember(project_id=project_id, user_id=user_id, role=role)
        db.add(member)
        await db.flush()
        await db.refresh(member)
        return member


# 싱글턴 인스턴스 — Singleton instance
project_repository: ProjectRepository = ProjectRepository()
