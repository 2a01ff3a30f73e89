import asyncio
import logging
import smtplib
from email.message import EmailMessage

from valkyrie.core.config import settings

logger = logging.getLogger(__name__)


class MailService:
    """
    Outgoing mail over SMTP. Without SMTP_HOST the message is only logged,
    which is what local development relies on.
    """

    def _build(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = settings.MAIL_FROM
        message["To"] = to
        message["Subject"] = subject
        message.set_content(html, subtype="html")
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            if settings.SMTP_USE_TLS:
                smtp.starttls()
            if settings.SMTP_USER:
                smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
            smtp.send_message(message)

    async def send(self, to: str, subject: str, html: str) -> None:
        message = self._build(to, subject, html)
        if not settings.SMTP_HOST:
            logger.info(f"SMTP_HOST not set, mail to {to} not sent: {subject}\n{html}")
            return

        await asyncio.to_thread(self._send_sync, message)
        logger.info(f"Mail sent to {to}: {subject}")

    async def send_reset_password(self, to: str, token: str) -> None:
        link = f"{settings.CORS_ORIGIN.rstrip('/')}/reset-password/{token}"
        await self.send(to, "Reset Password", f'<a href="{link}">Reset Password</a>')
