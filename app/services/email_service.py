"""
Отправка уведомлений о заявках с контактной формы.

Письмо уходит компании, а при включенном CONTACT_AUTO_REPLY
клиент получает автоответ с копией своего сообщения.
"""

import logging
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Optional

import aiosmtplib

from app.core.config import settings
from app.core.exceptions import EmailDeliveryError
from app.db.models import ContactMessage

logger = logging.getLogger(__name__)


class ContactNotifier:
    """Уведомления по SMTP."""

    def __init__(
        self,
        smtp_host: Optional[str],
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        use_tls: bool = True,
        from_email: str = "noreply@example.com",
        company_email: str = "sales@example.com",
        company_name: str = "Oscar Digital Systems",
        auto_reply: bool = True,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_email = from_email
        self.company_email = company_email
        self.company_name = company_name
        self.auto_reply = auto_reply

    @property
    def enabled(self) -> bool:
        return bool(self.smtp_host)

    def _build_message(self, to_email: str, subject: str, html_body: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to_email
        msg.attach(MIMEText(html_body, "html", "utf-8"))
        return msg

    def company_notification(self, contact: ContactMessage) -> MIMEMultipart:
        html_body = f"""
            <h2>New Contact Form Submission</h2>
            <p><strong>Name:</strong> {escape(contact.name)}</p>
            <p><strong>Email:</strong> {escape(contact.email)}</p>
            <p><strong>Phone:</strong> {escape(contact.phone)}</p>
            <p><strong>Subject:</strong> {escape(contact.subject)}</p>
            <p><strong>Message:</strong></p>
            <p>{escape(contact.message)}</p>
        """
        msg = self._build_message(
            self.company_email,
            f"New Contact Form Submission: {contact.subject}",
            html_body,
        )
        msg["Reply-To"] = contact.email
        return msg

    def customer_auto_reply(self, contact: ContactMessage) -> MIMEMultipart:
        html_body = f"""
            <h2>Thank you for contacting {escape(self.company_name)}</h2>
            <p>Dear {escape(contact.name)},</p>
            <p>We have received your message and will get back to you as soon as possible.</p>
            <p>Here's a copy of your message:</p>
            <hr>
            <p><strong>Subject:</strong> {escape(contact.subject)}</p>
            <p><strong>Message:</strong></p>
            <p>{escape(contact.message)}</p>
            <hr>
            <p>Best regards,</p>
            <p>{escape(self.company_name)} Team</p>
        """
        return self._build_message(
            contact.email, f"Thank you for contacting {self.company_name}", html_body
        )

    async def _send(self, msg: MIMEMultipart) -> None:
        await aiosmtplib.send(
            msg,
            hostname=self.smtp_host,
            port=self.smtp_port,
            username=self.smtp_user,
            password=self.smtp_password,
            start_tls=self.use_tls,
        )

    async def notify(self, contact: ContactMessage) -> bool:
        """
        Отправить уведомление компании и автоответ клиенту.

        Returns:
            bool: False, если SMTP не настроен

        Raises:
            EmailDeliveryError: Если SMTP сервер недоступен или отказал,
                либо письмо не удалось сформировать
        """
        if not self.enabled:
            logger.info("SMTP is not configured, skipping notification for %s", contact.id)
            return False

        try:
            await self._send(self.company_notification(contact))
            if self.auto_reply:
                await self._send(self.customer_auto_reply(contact))
        except (aiosmtplib.SMTPException, OSError, MessageError, ValueError) as exc:
            raise EmailDeliveryError(f"Failed to send email: {exc}") from exc

        logger.info("Contact notification sent for message %s", contact.id)
        return True


def get_contact_notifier() -> ContactNotifier:
    """Dependency с настроенным отправителем уведомлений."""
    return ContactNotifier(
        smtp_host=settings.SMTP_HOST,
        smtp_port=settings.SMTP_PORT,
        smtp_user=settings.SMTP_USER,
        smtp_password=settings.SMTP_PASSWORD,
        use_tls=settings.SMTP_USE_TLS,
        from_email=settings.CONTACT_EMAIL_FROM,
        company_email=settings.CONTACT_EMAIL_TO,
        company_name=settings.COMPANY_NAME,
        auto_reply=settings.CONTACT_AUTO_REPLY,
    )
