"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns.
These simplify error raising across services and repositories by
eliminating the need to specify status codes at each call site.

Usage:
    from app.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Task not found")
    raise DuplicateError("User is already a project member")
"""

from uuid import UUID

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (user, project, task, comment, etc.) does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. duplicate email, user already a project member).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised when the authenticated user lacks the required role
    (e.g. a member calling the email queue admin endpoints).

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing JWT token, expired token, invalid credentials).

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches
    (e.g. blank comment, comment owning both a task and a project, reply whose parent is in another scope).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def parse_uuid(value: str, field: str) -> UUID:
    """요청 본문의 UUID 문자열을 변환합니다.

    Parse a UUID string from a request body, raising a 400 naming the
    field when it is malformed.

    Args:
        value: UUID 문자열 (UUID string)
        field: 필드 이름 (Field name for the error message)

    Raises:
        BadRequestError: 형식이 잘못된 UUID (Malformed UUID)
    """
    try:
        return UUID(value)
    except (ValueError, TypeError):
        raise BadRequestError(f"잘못된 ID 형식입니다 (Invalid {field})") from None
