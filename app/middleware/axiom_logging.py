"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API call to Axiom: method, path, params,
masked request body, status code, duration and the error detail of
failed calls. Comment bodies are clipped so long discussions do not
blow up the event size. Without Axiom settings the middleware only
passes requests through.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = logging.getLogger(__name__)

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query params
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_MAX_STRING: int = 500
_MAX_ERROR: int = 500


def _scrub(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 및 긴 문자열 자르기.

    Mask sensitive keys and clip long strings, recursively.
    """
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else _scrub(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_scrub(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > _MAX_STRING:
        return data[:_MAX_STRING] + "...(truncated)"
    return data


async def _read_json_body(request: Request) -> Any:
    body_bytes: bytes = await request.body()
    if not body_bytes:
        return None
    try:
        return _scrub(json.loads(body_bytes))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 Axiom에 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Axiom 미설정 또는 제외 경로 — Pass through
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started: float = time.perf_counter()
        event: dict[str, Any] = {
            "service": settings.APP_NAME,
            "env": settings.APP_ENV,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else None,
        }
        if request.query_params:
            event["query_params"] = _scrub(dict(request.query_params))
        if request.method in ("POST", "PUT", "PATCH"):
            body: Any = await _read_json_body(request)
            if body is not None:
                event["request_body"] = body

        status_code: int = 500
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                response, event["error"] = await self._capture_error(response)
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["status_code"] = status_code
            event["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            if request.path_params:
                event["path_params"] = dict(request.path_params)
            self._ingest(event)

        return response

    async def _capture_error(self, response: Response) -> tuple[Response, str]:
        """에러 응답 본문에서 사유를 추출하고 응답을 다시 만듭니다.

        Read the error body for its detail and rebuild the response, since
        the streamed body can only be consumed once.
        """
        raw: bytes = b""
        async for chunk in response.body_iterator:
            raw += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        try:
            payload: Any = json.loads(raw)
            detail: Any = payload.get("detail", payload) if isinstance(payload, dict) else payload
            text: str = detail if isinstance(detail, str) else json.dumps(detail, ensure_ascii=False)
        except (json.JSONDecodeError, UnicodeDecodeError):
            text = raw.decode("utf-8", errors="replace")

        rebuilt: Response = Response(
            content=raw,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
        return rebuilt, text[:_MAX_ERROR]

    def _ingest(self, event: dict[str, Any]) -> None:
        # 로깅 실패는 요청 처리에 영향을 주지 않음 — Logging failures never fail the request
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            logger.warning("Axiom ingest failed for %s %s", event.get("method"), event.get("path"), exc_info=True)
