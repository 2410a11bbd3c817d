"""Outbound email for budget invites."""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from budget_api.config import Settings
from budget_api.core.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


def invite_url(frontend_url: str, token: str) -> str:
    return f"{frontend_url.rstrip('/')}?invite={token}"


class EmailSender(ABC):
    """Delivers invite emails. Replaced by a recording fake in tests."""

    @abstractmethod
    async def send_invite(self, recipient: str, token: str, budget_name: str) -> None:
        """Send an invite carrying a token-bearing link.

        Raises:
            EmailDeliveryError: If the message could not be delivered
        """


class SmtpEmailSender(EmailSender):
    """SMTP delivery; the blocking smtplib session runs in a worker thread."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def build_invite(self, recipient: str, token: str, budget_name: str) -> MIMEMultipart:
        url = invite_url(self.settings.frontend_url, token)
        days = self.settings.invite_expire_days
        sender = self.settings.smtp_from

        message = MIMEMultipart("alternative")
        message["Subject"] = f"You've been invited to join {budget_name}"
        message["From"] = formataddr((self.settings.smtp_from_name, sender))
        message["To"] = recipient
        message["Reply-To"] = self.settings.smtp_reply_to or sender

        text = (
            f"You've been invited to join {budget_name} on Budget Tracker.\n\n"
            f"Click this link to create your account and join:\n{url}\n\n"
            f"This invite will expire in {days} days.\n"
        )
        html = f"""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2 style="color: #1e293b;">You've been invited!</h2>
  <p>You've been invited to join <strong>{budget_name}</strong> on Budget Tracker.</p>
  <p style="text-align: center; margin: 30px 0;">
    <a href="{url}" style="background-color: #475569; color: white; padding: 12px 24px;
       text-decoration: none; border-radius: 6px;">Accept Invite &amp; Create Account</a>
  </p>
  <p style="color: #6b7280; font-size: 14px;">Or paste this link into your browser:<br>{url}</p>
  <p style="color: #6b7280; font-size: 12px;">
    This invite will expire in {days} days. If you didn't expect it, you can ignore this email.
  </p>
</div>
"""
        message.attach(MIMEText(text, "plain"))
        message.attach(MIMEText(html, "html"))
        return message

    def _deliver(self, message: MIMEMultipart) -> None:
        if not self.settings.smtp_host:
            raise smtplib.SMTPException("SMTP host is not configured")
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
            if self.settings.smtp_use_tls:
                smtp.starttls()
            if self.settings.smtp_user and self.settings.smtp_password:
                smtp.login(self.settings.smtp_user, self.settings.smtp_password)
            smtp.send_message(message)

    async def send_invite(self, recipient: str, token: str, budget_name: str) -> None:
        message = self.build_invite(recipient, token, budget_name)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "Invite email delivery failed",
                extra={"error_code": "EMAIL_001", "error_type": type(e).__name__},
            )
            raise EmailDeliveryError("EMAIL_001", details={"error": str(e)}) from e
        logger.info("Invite email sent")
