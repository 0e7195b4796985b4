"""멘션 서비스 — 코멘트 본문의 @멘션 추출 및 사용자 해석.

Mention Service — Extracts @name tokens from comment text and resolves
them to user ids with one batched lookup.
"""

import logging
import re
from typing import Literal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.repositories.user_repository import user_repository

logger = logging.getLogger(__name__)

# "@" 다음의 ASCII 단어 문자 — "@" followed by ASCII letters, digits, underscore
MENTION_PATTERN: re.Pattern[str] = re.compile(r"@(\w+)", re.ASCII)


def extract_mention_tokens(content: str) -> list[str]:
    """본문에서 멘션 토큰을 등장 순서대로 추출합니다.

    Scan left to right and return every raw token in order of appearance.
    Tokens are case-sensitive and are not de-duplicated here.

    Args:
        content: 코멘트 본문 (Comment body)

    Returns:
        list[str]: 원시 토큰 목록 (Raw tokens, possibly repeated)
    """
    if "@" not in content:
        return []
    return MENTION_PATTERN.findall(content)


class MentionService:
    """멘션 해석 서비스.

    Mention resolution service. The match field and the policy for a token
    shared by several users come from settings unless overridden.
    """

    async def resolve_mentions(
        self,
        db: AsyncSession,
        content: str,
        match_field: Literal["full_name", "username"] | None = None,
        collision_policy: Literal["skip", "first", "all"] | None = None,
    ) -> list[UUID]:
        """본문의 멘션을 사용자 ID 목록으로 해석합니다.

        Resolve the mentions in content to user ids, de-duplicated and in
        first-appearance order. Tokens without a matching active user are
        dropped. No lookup is issued when the text holds no token.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            content: 코멘트 본문 (Comment body)
            match_field: 비교 컬럼 (full_name | username)
            collision_policy: 동명이인 처리 (skip | first | all)

        Returns:
            list[UUID]: 멘션된 사용자 ID 목록 (Resolved user ids)
        """
        tokens: list[str] = extract_mention_tokens(content)
        if not tokens:
            return []

        field: str = match_field or settings.MENTION_MATCH_FIELD
        policy: str = collision_policy or settings.MENTION_COLLISION_POLICY

        users: list[User] = await user_repository.find_active_by_names(db, set(tokens), field)
        candidates: dict[str, list[UUID]] = {}
        for user in users:
            candidates.setdefault(getattr(user, field), []).append(user.id)

        resolved: list[UUID] = []
        seen: set[UUID] = set()
        warned: set[str] = set()
        for token in tokens:
            matches: list[UUID] = candidates.get(token, [])
            if len(matches) > 1:
                if token not in warned:
                    warned.add(token)
                    logger.warning(
                        "Mention @%s matches %d users (policy=%s)", token, len(matches), policy
                    )
                if policy == "skip":
                    matches = []
                elif policy == "first":
                    matches = matches[:1]
            for user_id in matches:
                if user_id not in seen:
                    seen.add(user_id)
                    resolved.append(user_id)
        return resolved


# 싱글턴 인스턴스 — Singleton instance
mention_service: MentionService = MentionService()
