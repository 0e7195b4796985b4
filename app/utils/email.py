"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

SMTP transport used by the email queue sweep.
SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

import aiosmtplib

from app.config import settings


async def send_email(
    to: str,
    subject: str,
    html: str,
    text: str | None = None,
    to_name: str | None = None,
) -> None:
    """이메일 발송.

    Send one multipart/alternative message. Any transport problem is
    raised to the caller; the queue decides what a failure means.

    Args:
        to: 수신자 이메일 주소
        subject: 제목
        html: HTML 본문
        text: 플레인텍스트 본문 (없으면 생략)
        to_name: 수신자 표시 이름 (없으면 주소만 사용)

    Raises:
        aiosmtplib.SMTPException: SMTP 오류 (Any SMTP-level error)
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.SMTP_FROM_NAME, settings.SMTP_FROM_EMAIL))
    msg["To"] = formataddr((to_name, to)) if to_name else to

    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))

    await aiosmtplib.send(
        msg,
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER or None,
        password=settings.SMTP_PASSWORD or None,
        start_tls=settings.SMTP_START_TLS,
    )
