"""이메일 템플릿 렌더링 모듈.

Email template rendering. Each template maps a fixed set of named data
fields to an HTML body and a plain-text body. Values placed into HTML are
escaped; the plain-text rendering carries them unchanged.

Templates:
    - mention: mentionedBy, content, taskTitle?, projectName?, actionUrl
    - task_comment: commenterName, taskTitle, projectName, content, actionUrl
    - task_assigned: assigneeName, taskTitle, projectName, priority, dueDate?, description?, actionUrl
    - project_assigned: memberName, projectName, role, projectManager, description?, actionUrl
"""

from dataclasses import dataclass
from html import escape
from typing import Any, Callable


class EmailTemplateNotFoundError(ValueError):
    """알 수 없는 템플릿 이름 (Unknown template name)."""

    def __init__(self, template: str) -> None:
        super().__init__(f'Email template "{template}" not found')
        self.template: str = template


@dataclass(frozen=True)
class RenderedEmail:
    """렌더링 결과 (Rendered subject and bodies)."""

    subject: str
    html: str
    text: str


_FOOTER: str = """
          <hr style="margin: 30px 0;">
          <p style="color: #666; font-size: 12px;">
            This is an automated notification from PMS System. Please do not reply to this email.
          </p>
        </div>
      """


def _h(data: dict[str, Any], key: str) -> str:
    """HTML 삽입용 값 — 없으면 빈 문자열 (Escaped value for HTML)."""
    value: Any = data.get(key)
    return escape(str(value)) if value not in (None, "") else ""


def _t(data: dict[str, Any], key: str) -> str:
    """텍스트 삽입용 값 (Raw value for plain text)."""
    value: Any = data.get(key)
    return str(value) if value not in (None, "") else ""


def _button(url: str, label: str, background: str, color: str = "white") -> str:
    return (
        "          <p>\n"
        f'            <a href="{url}" style="background: {background}; color: {color}; '
        'padding: 10px 20px; text-decoration: none; border-radius: 5px;">\n'
        f"              {label}\n"
        "            </a>\n"
        "          </p>"
    )


def _render_mention(data: dict[str, Any]) -> RenderedEmail:
    task_line: str = f"<p><strong>Task:</strong> {_h(data, 'taskTitle')}</p>" if _t(data, "taskTitle") else ""
    project_line: str = f"<p><strong>Project:</strong> {_h(data, 'projectName')}</p>" if _t(data, "projectName") else ""
    html: str = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">You were mentioned in a comment</h2>
          <p>Hi there,</p>
          <p><strong>{_h(data, 'mentionedBy')}</strong> mentioned you in a comment:</p>
          <div style="background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <p style="margin: 0;">{_h(data, 'content')}</p>
          </div>
          {task_line}
          {project_line}
{_button(_h(data, 'actionUrl'), 'View Comment', '#007bff')}{_FOOTER}"""
    text: str = (
        f"You were mentioned in a comment by {_t(data, 'mentionedBy')}:\n\n"
        f"{_t(data, 'content')}\n\n"
        + (f"Task: {_t(data, 'taskTitle')}\n" if _t(data, "taskTitle") else "")
        + (f"Project: {_t(data, 'projectName')}\n" if _t(data, "projectName") else "")
        + f"\nView: {_t(data, 'actionUrl')}"
    )
    return RenderedEmail("You were mentioned in a comment", html, text)


def _render_task_comment(data: dict[str, Any]) -> RenderedEmail:
    html: str = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">New comment on your task</h2>
          <p>Hi there,</p>
          <p><strong>{_h(data, 'commenterName')}</strong> commented on your task:</p>
          <div style="background: #e3f2fd; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <h3 style="margin: 0 0 10px 0; color: #1976d2;">{_h(data, 'taskTitle')}</h3>
            <p style="margin: 0; color: #666;">Project: {_h(data, 'projectName')}</p>
          </div>
          <div style="background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <p style="margin: 0;">{_h(data, 'content')}</p>
          </div>
{_button(_h(data, 'actionUrl'), 'View Task', '#28a745')}{_FOOTER}"""
    text: str = (
        f'New comment on your task "{_t(data, "taskTitle")}" by {_t(data, "commenterName")}:\n\n'
        f"{_t(data, 'content')}\n\n"
        f"Project: {_t(data, 'projectName')}\n"
        f"View: {_t(data, 'actionUrl')}"
    )
    return RenderedEmail(f'New comment on "{_t(data, "taskTitle")}"', html, text)


def _render_task_assigned(data: dict[str, Any]) -> RenderedEmail:
    due_line: str = (
        f'<p style="margin: 5px 0 0 0; color: #666;">Due: {_h(data, "dueDate")}</p>'
        if _t(data, "dueDate") else ""
    )
    description_block: str = (
        '<div style="background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 15px 0;">'
        f'<p style="margin: 0;">{_h(data, "description")}</p></div>'
        if _t(data, "description") else ""
    )
    html: str = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">Task Assigned to You</h2>
          <p>Hi {_h(data, 'assigneeName')},</p>
          <p>You have been assigned a new task:</p>
          <div style="background: #e8f5e8; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <h3 style="margin: 0 0 10px 0; color: #2e7d32;">{_h(data, 'taskTitle')}</h3>
            <p style="margin: 0; color: #666;">Project: {_h(data, 'projectName')}</p>
            <p style="margin: 5px 0 0 0; color: #666;">Priority: {_h(data, 'priority')}</p>
            {due_line}
          </div>
          {description_block}
{_button(_h(data, 'actionUrl'), 'View Task', '#28a745')}{_FOOTER}"""
    text: str = (
        f'Task assigned to you: "{_t(data, "taskTitle")}"\n\n'
        f"Project: {_t(data, 'projectName')}\n"
        f"Priority: {_t(data, 'priority')}\n"
        + (f"Due: {_t(data, 'dueDate')}\n" if _t(data, "dueDate") else "")
        + "\n"
        + (f"Description: {_t(data, 'description')}\n" if _t(data, "description") else "")
        + f"\nView: {_t(data, 'actionUrl')}"
    )
    return RenderedEmail(f"Task assigned: {_t(data, 'taskTitle')}", html, text)


def _render_project_assigned(data: dict[str, Any]) -> RenderedEmail:
    description_block: str = (
        '<div style="background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 15px 0;">'
        f'<p style="margin: 0;">{_h(data, "description")}</p></div>'
        if _t(data, "description") else ""
    )
    html: str = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
          <h2 style="color: #333;">Added to Project Team</h2>
          <p>Hi {_h(data, 'memberName')},</p>
          <p>You have been added to a project team:</p>
          <div style="background: #fff3cd; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <h3 style="margin: 0 0 10px 0; color: #856404;">{_h(data, 'projectName')}</h3>
            <p style="margin: 0; color: #666;">Role: {_h(data, 'role')}</p>
            <p style="margin: 5px 0 0 0; color: #666;">Project Manager: {_h(data, 'projectManager')}</p>
          </div>
          {description_block}
{_button(_h(data, 'actionUrl'), 'View Project', '#ffc107', '#212529')}{_FOOTER}"""
    text: str = (
        f'You have been added to project "{_t(data, "projectName")}"\n\n'
        f"Role: {_t(data, 'role')}\n"
        f"Project Manager: {_t(data, 'projectManager')}\n"
        + (f"Description: {_t(data, 'description')}\n" if _t(data, "description") else "")
        + f"\nView: {_t(data, 'actionUrl')}"
    )
    return RenderedEmail(f'You have been added to project "{_t(data, "projectName")}"', html, text)


# 템플릿 레지스트리 — Template name -> renderer
TEMPLATES: dict[str, Callable[[dict[str, Any]], RenderedEmail]] = {
    "mention": _render_mention,
    "task_comment": _render_task_comment,
    "task_assigned": _render_task_assigned,
    "project_assigned": _render_project_assigned,
}


def render_email(template: str, data: dict[str, Any]) -> RenderedEmail:
    """템플릿을 렌더링합니다.

    Render a named template. Rendering is deterministic: the same name and
    data always yield the same subject, HTML and text.

    Args:
        template: 템플릿 이름 (Template name)
        data: 템플릿 데이터 (Named data fields)

    Returns:
        RenderedEmail: 제목과 본문 (Subject, HTML and text)

    Raises:
        EmailTemplateNotFoundError: 알 수 없는 템플릿 (Unknown template name)
    """
    renderer = TEMPLATES.get(template)
    if renderer is None:
        raise EmailTemplateNotFoundError(template)
    return renderer(data)
