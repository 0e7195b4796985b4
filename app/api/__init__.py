"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint into a single router
mounted at /api/v1.

Included routers:
    - auth: 로그인, 내 정보 (Login, current user)
    - users: 활성 사용자 목록 (Active user directory)
    - projects: 프로젝트와 멤버 (Projects and members)
    - tasks: 업무 (Tasks)
    - comments: 코멘트 작성 (Comment submission with mention fan-out)
    - notifications: 내 알림 (My notifications)
    - email_queue: 이메일 큐 관리 (Email queue admin)
"""

from fastapi import APIRouter

from app.api.auth import router as auth_router
from app.api.comments import router as comments_router
from app.api.email_queue import router as email_queue_router
from app.api.notifications import router as notifications_router
from app.api.projects import router as projects_router
from app.api.tasks import router as tasks_router
from app.api.users import router as users_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(projects_router, prefix="/projects", tags=["Projects"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(comments_router, prefix="/comments", tags=["Comments"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(email_queue_router, prefix="/email-queue", tags=["Email Queue"])
