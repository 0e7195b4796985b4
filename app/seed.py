"""초기 데이터 시드 스크립트 — 관리자 계정과 데모 프로젝트 생성.

Seed script — Creates the admin account plus a small demo team, project
and task so mentions and notifications can be tried right away.

Usage:
    python -m app.seed

Creates:
    - 1개 관리자 계정: admin@pms.com / admin123 (1 admin user)
    - 3명의 데모 사용자: dave (PM), alice, bob / <username>123 (3 demo users)
    - 1개 프로젝트 "Website Redesign" 및 업무 1개 (1 project with 1 task)
"""

import asyncio

from sqlalchemy import select

from app.database import async_session, engine, Base
from app.models import Project, ProjectMember, Task, User
from app.utils.password import hash_password


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data.
    Creates tables if they don't exist, then inserts the admin user and
    the demo team.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        # 관리자 계정이 있으면 건너뜀 (Skip when the admin account exists)
        result = await db.execute(select(User).where(User.username == "admin"))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        admin: User = User(
            username="admin",
            full_name="System Admin",
            email="admin@pms.com",
            password_hash=hash_password("admin123"),
            role="admin",
            is_active=True,
        )
        db.add(admin)

        # 데모 사용자 — 멘션은 표시 이름(@Dave 등)으로 해석됨
        # Demo users; mentions resolve against the display name (@Dave, ...)
        users: dict[str, User] = {}
        for username, full_name, role in [
            ("dave", "Dave", "project_manager"),
            ("alice", "Alice", "member"),
            ("bob", "Bob", "member"),
        ]:
            user: User = User(
                username=username,
                full_name=full_name,
                email=f"{username}@pms.com",
                password_hash=hash_password(f"{username}123"),
                role=role,
                is_active=True,
            )
            db.add(user)
            users[username] = user
        await db.flush()  # flush로 user.id 생성 (Flush to generate user ids)

        project: Project = Project(
            name="Website Redesign",
            description="Refresh the marketing site",
            project_code="PROJ-DEMO",
            priority="high",
            created_by=users["dave"].id,
        )
        db.add(project)
        await db.flush()

        for username, role in [("dave", "project_manager"), ("alice", "member"), ("bob", "member")]:
            db.add(ProjectMember(project_id=project.id, user_id=users[username].id, role=role))

        db.add(
            Task(
                project_id=project.id,
                title="Landing page",
                assigned_to=users["alice"].id,
                created_by=users["dave"].id,
                status="todo",
            )
        )

        await db.commit()
        print(f"Seeded: admin=admin@pms.com/admin123, project={project.project_code}")


if __name__ == "__main__":
    asyncio.run(seed())
