"""테스트 인프라 — 테스트 DB, 세션, httpx 클라이언트 픽스처.

Test infrastructure — Database, session, and httpx client fixtures.
TEST_DATABASE_URL selects the database; by default an in-memory SQLite
database (aiosqlite) shared through a StaticPool. The schema is created
before and dropped after every test.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import *  # noqa: F401,F403 — register all models with metadata
from app.utils.jwt import create_access_token
from app.utils.password import hash_password

# ---------------------------------------------------------------------------
# 테스트 DB 설정
# ---------------------------------------------------------------------------
TEST_DATABASE_URL: str = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """테스트용 async 엔진. 스키마를 생성하고 종료 시 삭제합니다."""
    eng = create_async_engine(TEST_DATABASE_URL, echo=False, **_engine_kwargs(TEST_DATABASE_URL))
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """테스트 엔진에 묶인 세션 팩토리."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """각 테스트에 격리된 DB 세션을 제공합니다."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션을 오버라이드합니다."""
    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def make_user(
    db: AsyncSession,
    username: str,
    full_name: str | None = None,
    role: str = "member",
    is_active: bool = True,
):
    """테스트 사용자를 생성합니다."""
    from app.models.user import User
    user = User(
        username=username,
        full_name=full_name or username,
        email=f"{username}@test.com",
        password_hash=hash_password(f"{username}123!"),
        role=role,
        is_active=is_active,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession):
    return await make_user(db, "admin", "Test Admin", role="admin")


@pytest_asyncio.fixture
async def alice(db: AsyncSession):
    return await make_user(db, "alice")


@pytest_asyncio.fixture
async def bob(db: AsyncSession):
    return await make_user(db, "bob")


@pytest_asyncio.fixture
async def carol(db: AsyncSession):
    return await make_user(db, "carol")


@pytest_asyncio.fixture
async def dave(db: AsyncSession):
    return await make_user(db, "dave", role="project_manager")


@pytest_asyncio.fixture
async def project(db: AsyncSession, dave):
    """dave가 관리하는 테스트 프로젝트를 생성합니다."""
    from app.models.project import Project, ProjectMember
    p = Project(name="Website Redesign", project_code="PROJ-TEST", created_by=dave.id)
    db.add(p)
    await db.flush()
    db.add(ProjectMember(project_id=p.id, user_id=dave.id, role="project_manager"))
    await db.flush()
    await db.refresh(p)
    return p


@pytest_asyncio.fixture
async def task(db: AsyncSession, project, carol, dave):
    """carol에게 배정된 테스트 업무를 생성합니다."""
    from app.models.task import Task
    t = Task(
        project_id=project.id,
        title="Landing page",
        assigned_to=carol.id,
        created_by=dave.id,
    )
    db.add(t)
    await db.flush()
    await db.refresh(t)
    return t


def make_token(user) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(user.id), "role": user.role})


@pytest.fixture
def admin_token(admin_user) -> str:
    return make_token(admin_user)


@pytest.fixture
def dave_token(dave) -> str:
    return make_token(dave)


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
