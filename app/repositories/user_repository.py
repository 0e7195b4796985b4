"""사용자 레포지토리 — 사용자 조회 및 멘션 대상 검색 쿼리.

User Repository — Lookup queries for users, including the batched
name lookup used to resolve @mentions.
"""

from typing import Iterable, Literal
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        """UserRepository를 초기화합니다.

        Initialize the UserRepository with the User model.
        """
        super().__init__(User)

    async def get_by_email(
        self,
        db: AsyncSession,
        email: str,
    ) -> User | None:
        """이메일로 사용자를 조회합니다 (Retrieve a user by email)."""
        result = await db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_active_users(
        self,
        db: AsyncSession,
    ) -> list[User]:
        """활성 사용자 목록을 이름순으로 조회합니다.

        Retrieve active users ordered by display name.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)

        Returns:
            list[User]: 활성 사용자 목록 (Active users)
        """
        result = await db.execute(
            select(User).where(User.is_active.is_(True)).order_by(User.full_name)
        )
        return list(result.scalars().all())

    async def get_by_ids(
        self,
        db: AsyncSession,
        user_ids: Iterable[UUID],
    ) -> dict[UUID, User]:
        """여러 사용자를 한 번에 조회하여 ID 기준 딕셔너리로 반환합니다.

        Retrieve several users in one query, keyed by id.
        """
        ids: list[UUID] = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(ids)))
        return {u.id: u for u in result.scalars().all()}

    async def find_active_by_names(
        self,
        db: AsyncSession,
        names: set[str],
        field: Literal["full_name", "username"] = "full_name",
    ) -> list[User]:
        """이름 집합과 일치하는 활성 사용자를 한 번의 쿼리로 조회합니다.

        Batched lookup of active users whose name field exactly matches one
        of the given tokens. Results are ordered by creation time then id so
        that collision handling downstream is deterministic.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            names: 찾을 이름 집합 (Distinct raw mention tokens)
            field: 비교할 컬럼 (full_name = display name, username = unique handle)

        Returns:
            list[User]: 일치하는 사용자 목록 (Matching users)
        """
        if not names:
            return []
        column = User.username if field == "username" else User.full_name
        query: Select = (
            select(User)
            .where(column.in_(sorted(names)), User.is_active.is_(True))
            .order_by(User.created_at, User.id)
        )
        result = await db.execute(query)
        return list(result.scalars().all())


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
