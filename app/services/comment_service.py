"""코멘트 서비스 — 코멘트 작성 및 조회 비즈니스 로직.

Comment Service — Creates comments and drives the mention/notification
fan-out. Everything a comment produces (the comment row, its
notifications, its queued emails and its activity row) is flushed into
the caller's transaction and committed together by the router.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comment import Comment
from app.models.project import Project
from app.models.task import Task
from app.models.user import User
from app.repositories.activity_log_repository import activity_log_repository
from app.repositories.comment_repository import comment_repository
from app.repositories.project_repository import project_repository
from app.repositories.task_repository import task_repository
from app.schemas.activity import CommentAddedDetails, CommentAddedEvent, CommentAddedMeta
from app.schemas.comment import CommentCreate, CommentResponse
from app.services.mention_service import mention_service
from app.services.notification_service import notification_service
from app.utils.exceptions import BadRequestError, NotFoundError, parse_uuid


class CommentService:
    """코멘트 서비스.

    Comment service: validation, mention resolution, persistence and fan-out.
    """

    def build_response(self, comment: Comment) -> CommentResponse:
        """코멘트 ORM 객체를 응답 스키마로 변환합니다.

        Convert a comment (author and parent loaded) to its response.

        Args:
            comment: 작성자/부모가 로드된 코멘트 (Comment with author and parent loaded)

        Returns:
            CommentResponse: 코멘트 응답 (Comment response)
        """
        author: User = comment.author
        parent: Comment | None = comment.parent
        return CommentResponse(
            id=str(comment.id),
            content=comment.content,
            task_id=str(comment.task_id) if comment.task_id else None,
            project_id=str(comment.project_id) if comment.project_id else None,
            parent_id=str(comment.parent_id) if comment.parent_id else None,
            user_id=str(comment.user_id),
            user_name=author.full_name,
            user_email=author.email,
            user_avatar=author.avatar_url,
            mentioned_user_ids=list(comment.mentioned_user_ids or []),
            parent_user_name=parent.author.full_name if parent is not None else None,
            parent_content=parent.content if parent is not None else None,
            created_at=comment.created_at,
        )

    async def create_comment(
        self,
        db: AsyncSession,
        data: CommentCreate,
        author: User,
    ) -> CommentResponse:
        """코멘트를 작성하고 알림/이메일을 생성합니다.

        Create a comment on a task or a project, resolve its @mentions and
        fan it out to the mentioned users and, for task comments, the task
        assignee. Validation happens before any write.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            data: 코멘트 작성 데이터 (Comment creation data)
            author: 작성자 (Authenticated author)

        Returns:
            CommentResponse: 생성된 코멘트 (Created comment)

        Raises:
            BadRequestError: 빈 본문, 대상 누락/중복, 다른 범위의 부모 코멘트
                             (Blank body, missing or double owner, parent in another scope)
            NotFoundError: 업무/프로젝트/부모 코멘트가 없을 때 (Task, project or parent missing)
        """
        if not data.content or not data.content.strip():
            raise BadRequestError("코멘트 내용이 필요합니다 (Comment content is required)")
        if (data.task_id is None) == (data.project_id is None):
            raise BadRequestError(
                "업무 또는 프로젝트 중 하나만 지정해야 합니다 (Exactly one of task_id or project_id is required)"
            )

        task: Task | None = None
        task_id: UUID | None = None
        project_id: UUID | None = None
        if data.task_id is not None:
            task_id = parse_uuid(data.task_id, "task_id")
            task = await task_repository.get_with_context(db, task_id)
            if task is None:
                raise NotFoundError("업무를 찾을 수 없습니다 (Task not found)")
            project: Project = task.project
        else:
            project_id = parse_uuid(data.project_id, "project_id")
            found: Project | None = await project_repository.get_by_id(db, project_id)
            if found is None:
                raise NotFoundError("프로젝트를 찾을 수 없습니다 (Project not found)")
            project = found

        parent_id: UUID | None = None
        if data.parent_id is not None:
            parent_id = parse_uuid(data.parent_id, "parent_id")
            parent: Comment | None = await comment_repository.get_by_id(db, parent_id)
            if parent is None:
                raise NotFoundError("부모 코멘트를 찾을 수 없습니다 (Parent comment not found)")
            if parent.task_id != task_id or parent.project_id != project_id:
                raise BadRequestError(
                    "부모 코멘트가 같은 업무/프로젝트에 있어야 합니다 (Parent comment belongs to a different task or project)"
                )

        mentioned_ids: list[UUID] = await mention_service.resolve_mentions(db, data.content)

        comment: Comment = await comment_repository.create_comment(
            db,
            content=data.content,
            user_id=author.id,
            task_id=task_id,
            project_id=project_id,
            parent_id=parent_id,
            mentioned_user_ids=mentioned_ids,
        )

        await notification_service.notify_comment(
            db, comment, author, mentioned_ids, project, task
        )

        await activity_log_repository.record(
            db,
            actor_id=author.id,
            event=CommentAddedEvent(
                details=CommentAddedDetails(
                    comment_id=str(comment.id),
                    comment_preview=data.content[:50],
                ),
                meta=CommentAddedMeta(
                    mention_count=len(mentioned_ids),
                    is_reply=parent_id is not None,
                    mentioned_user_ids=[str(uid) for uid in mentioned_ids],
                ),
            ),
            task_id=task_id,
            project_id=project.id,
        )

        detail: Comment | None = await comment_repository.get_detail(db, comment.id)
        return self.build_response(detail)

    async def list_comments(
        self,
        db: AsyncSession,
        task_id: UUID | None = None,
        project_id: UUID | None = None,
    ) -> list[CommentResponse]:
        """업무 또는 프로젝트의 코멘트를 작성순으로 조회합니다.

        List comments on a task or a project, oldest first.

        Raises:
            BadRequestError: 대상이 정확히 하나가 아닐 때 (Not exactly one scope given)
        """
        if (task_id is None) == (project_id is None):
            raise BadRequestError(
                "업무 또는 프로젝트 중 하나만 지정해야 합니다 (Exactly one of task_id or project_id is required)"
            )
        comments: list[Comment] = await comment_repository.list_for_owner(
            db, task_id=task_id, project_id=project_id
        )
        return [self.build_response(c) for c in comments]


# 싱글턴 인스턴스 — Singleton instance
comment_service: CommentService = CommentService()
