"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 라우터, 백그라운드 작업 등록.

FastAPI application entry point — Middleware, router and background
email sweep registration.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import api_router
from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.email_queue_service import email_queue_service

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """주기적 이메일 스윕을 시작하고 종료 시 중지합니다.

    Start the periodic email sweep on startup and stop it on shutdown.
    """
    if settings.EMAIL_QUEUE_ENABLED:
        email_queue_service.start()
    try:
        yield
    finally:
        await email_queue_service.stop()


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """처리되지 않은 예외를 500 응답으로 변환합니다.

    Convert any unhandled exception into a generic 500. The request's
    uncommitted transaction is discarded with its session.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "ok"}


# 라우터 등록 — All endpoints under /api/v1
app.include_router(api_router, prefix="/api/v1")
