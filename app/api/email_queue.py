"""이메일 큐 라우터 — 관리자용 큐 조회 및 즉시 처리.

Email Queue Router — Admin-only queue monitoring and a manual sweep.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.database import get_db
from app.models.user import User
from app.repositories.email_queue_repository import email_queue_repository
from app.schemas.common import PaginatedResponse
from app.schemas.email import DrainResultResponse, QueuedEmailResponse
from app.services.email_queue_service import DrainResult, email_queue_service

router: APIRouter = APIRouter()


@router.get("", response_model=PaginatedResponse)
async def list_queued_emails(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    status: Annotated[str | None, Query(pattern=r"^(pending|sending|sent|failed)$")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    """큐 이메일 목록을 상태별로 조회합니다.

    List queued emails, optionally filtered by status, newest first.
    """
    emails, total = await email_queue_repository.list_by_status(db, status, page, per_page)
    items: list[dict] = [
        QueuedEmailResponse(
            id=str(e.id),
            to_email=e.to_email,
            to_name=e.to_name,
            subject=e.subject,
            template_name=e.template_name,
            status=e.status,
            attempts=e.attempts,
            max_attempts=e.max_attempts,
            scheduled_at=e.scheduled_at,
            error_message=e.error_message,
            sent_at=e.sent_at,
            created_at=e.created_at,
        ).model_dump()
        for e in emails
    ]
    return {"items": items, "total": total, "page": page, "per_page": per_page}


@router.post("/process", response_model=DrainResultResponse)
async def process_queue(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> DrainResultResponse:
    """스윕을 즉시 한 번 실행합니다.

    Run one sweep now. Returns skipped=true when a sweep is already running.
    """
    result: DrainResult = await email_queue_service.run_sweep(db)
    return DrainResultResponse(
        selected=result.selected,
        sent=result.sent,
        retried=result.retried,
        failed=result.failed,
        skipped=result.skipped,
    )
