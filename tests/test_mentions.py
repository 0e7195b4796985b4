"""멘션 추출/해석 테스트.

Mention extraction and resolution tests.
"""

import logging
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.mention_service import extract_mention_tokens, mention_service
from tests.conftest import make_user


class TestExtractMentionTokens:
    """멘션 토큰 추출 테스트."""

    def test_no_at_sign(self):
        assert extract_mention_tokens("no mentions here") == []

    def test_tokens_in_order_with_repeats(self):
        tokens = extract_mention_tokens("@alice said hi to @bob and @alice again")
        assert tokens == ["alice", "bob", "alice"]

    def test_trailing_punctuation_not_part_of_token(self):
        assert extract_mention_tokens("Great work @carol!") == ["carol"]
        assert extract_mention_tokens("(@bob), @dave_2.") == ["bob", "dave_2"]

    def test_bare_at_sign(self):
        assert extract_mention_tokens("meet @ noon, email me @") == []

    def test_case_preserved(self):
        assert extract_mention_tokens("@Alice and @alice") == ["Alice", "alice"]


class TestResolveMentionsMocked:
    """조회 호출을 모킹한 멘션 해석 테스트."""

    async def test_no_lookup_without_at_sign(self):
        with patch(
            "app.services.mention_service.user_repository.find_active_by_names",
            new_callable=AsyncMock,
        ) as lookup:
            result = await mention_service.resolve_mentions(AsyncMock(), "plain text, nothing to see")
        assert result == []
        lookup.assert_not_called()

    async def test_deduplicated_first_appearance_order(self):
        alice_id, bob_id = uuid.uuid4(), uuid.uuid4()
        users = [
            SimpleNamespace(id=bob_id, full_name="bob"),
            SimpleNamespace(id=alice_id, full_name="alice"),
        ]
        with patch(
            "app.services.mention_service.user_repository.find_active_by_names",
            new_callable=AsyncMock,
            return_value=users,
        ) as lookup:
            result = await mention_service.resolve_mentions(
                AsyncMock(), "@alice said hi to @bob and @alice again"
            )
        assert result == [alice_id, bob_id]
        lookup.assert_awaited_once()
        # 한 번의 배치 조회, 중복 없는 토큰 집합 (one batched lookup of distinct tokens)
        assert lookup.await_args.args[1] == {"alice", "bob"}

    async def test_unknown_tokens_dropped(self):
        with patch(
            "app.services.mention_service.user_repository.find_active_by_names",
            new_callable=AsyncMock,
            return_value=[],
        ):
            result = await mention_service.resolve_mentions(AsyncMock(), "@nobody here")
        assert result == []


class TestResolveMentionsDatabase:
    """DB 기반 멘션 해석 테스트."""

    async def test_resolves_active_users_by_display_name(self, db: AsyncSession, alice, bob):
        result = await mention_service.resolve_mentions(db, "ping @bob and @alice")
        assert result == [bob.id, alice.id]

    async def test_inactive_user_not_mentionable(self, db: AsyncSession):
        await make_user(db, "ghost", is_active=False)
        assert await mention_service.resolve_mentions(db, "@ghost") == []

    async def test_case_sensitive(self, db: AsyncSession, alice):
        assert await mention_service.resolve_mentions(db, "@Alice") == []

    async def test_match_by_username(self, db: AsyncSession):
        erin = await make_user(db, "erin_k", full_name="Erin Kim")
        assert await mention_service.resolve_mentions(db, "@erin_k", match_field="username") == [erin.id]
        assert await mention_service.resolve_mentions(db, "@erin_k", match_field="full_name") == []

    async def test_collision_skip(self, db: AsyncSession, caplog):
        await make_user(db, "sam1", full_name="sam")
        await make_user(db, "sam2", full_name="sam")
        with caplog.at_level(logging.WARNING, logger="app.services.mention_service"):
            result = await mention_service.resolve_mentions(db, "@sam", collision_policy="skip")
        assert result == []
        assert "matches 2 users" in caplog.text

    async def test_collision_first(self, db: AsyncSession):
        first = await make_user(db, "sam1", full_name="sam")
        await make_user(db, "sam2", full_name="sam")
        result = await mention_service.resolve_mentions(db, "@sam @sam", collision_policy="first")
        assert result == [first.id]

    async def test_collision_all(self, db: AsyncSession):
        first = await make_user(db, "sam1", full_name="sam")
        second = await make_user(db, "sam2", full_name="sam")
        result = await mention_service.resolve_mentions(db, "@sam", collision_policy="all")
        assert set(result) == {first.id, second.id}
        assert len(result) == 2
