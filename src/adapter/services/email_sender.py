import asyncio
import logging
import smtplib
import uuid
from abc import abstractmethod
from datetime import datetime
from email.message import EmailMessage

from src.app.services.email_sender import EmailResult, IEmailSender

logger = logging.getLogger(__name__)


class TemplateEmailSender(IEmailSender):
    """Builds SecureBidz security messages; subclasses deliver them."""

    product_name = "SecureBidz"

    async def send_mfa_code(self, email: str, code: str) -> EmailResult:
        subject = f"Your MFA Verification Code - {self.product_name}"
        body = (
            "Hello,\n\n"
            f"Your Multi-Factor Authentication code for {self.product_name} is: {code}\n\n"
            "This code will expire in 10 minutes.\n"
            "If you didn't request this code, please contact our security team immediately.\n"
        )
        return await self._safe_deliver(email, subject, body)

    async def send_account_lockout_notification(
        self, email: str, unlock_time: datetime
    ) -> EmailResult:
        subject = f"Account Security Alert - {self.product_name}"
        body = (
            "Hello,\n\n"
            "Your account has been temporarily locked after multiple failed login attempts.\n"
            f"It will be unlocked at {unlock_time.isoformat()} UTC.\n\n"
            "If this wasn't you, we recommend changing your password once access is restored.\n"
        )
        return await self._safe_deliver(email, subject, body)

    async def send_password_change_notification(
        self, email: str, changed_at: datetime
    ) -> EmailResult:
        subject = f"Password Changed - {self.product_name}"
        body = (
            "Hello,\n\n"
            f"The password for your account was changed at {changed_at.isoformat()} UTC.\n"
            "If you did not make this change, contact our security team immediately.\n"
        )
        return await self._safe_deliver(email, subject, body)

    async def _safe_deliver(self, to: str, subject: str, body: str) -> EmailResult:
        try:
            return await self._deliver(to, subject, body)
        except Exception as exc:
            logger.error("Email delivery failed (%s): %s", subject, exc.__class__.__name__)
            return EmailResult(success=False, error=str(exc))

    @abstractmethod
    async def _deliver(self, to: str, subject: str, body: str) -> EmailResult:
        pass


class ConsoleEmailSender(TemplateEmailSender):
    """Development sender: logs that a message would be sent, without its body."""

    async def _deliver(self, to: str, subject: str, body: str) -> EmailResult:
        message_id = str(uuid.uuid4())
        logger.info("Email queued to %s: %s (%s)", to, subject, message_id)
        return EmailResult(success=True, message_id=message_id)


class SmtpEmailSender(TemplateEmailSender):
    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 10,
    ):
        self.host = host
        self.port = port
        self.sender = sender
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    async def _deliver(self, to: str, subject: str, body: str) -> EmailResult:
        message = EmailMessage()
        message["From"] = f"{self.product_name} Security <{self.sender}>"
        message["To"] = to
        message["Subject"] = subject
        message_id = f"<{uuid.uuid4()}@{self.host}>"
        message["Message-ID"] = message_id
        message.set_content(body)

        await asyncio.wait_for(
            asyncio.to_thread(self._send_blocking, message), timeout=self.timeout + 1
        )
        return EmailResult(success=True, message_id=message_id)

    def _send_blocking(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(message)


def build_email_sender(config) -> IEmailSender:
    if config.EMAIL_BACKEND == "smtp":
        return SmtpEmailSender(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            sender=config.SMTP_FROM,
            username=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            timeout=config.SMTP_TIMEOUT_SECONDS,
        )
    return ConsoleEmailSender()
