"""
Email Service

Sends one-time login codes over SMTP.
"""
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Tuple

import aiosmtplib

from app.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails"""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings
        self.enabled = bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD)

    def _build_message(self, to_email: str, subject: str, html: str) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f'"{self.settings.EMAIL_FROM_NAME}" <{self.settings.EMAIL_FROM}>'
        message["To"] = to_email
        message.attach(MIMEText(html, "html"))
        return message

    async def send(self, to_email: str, subject: str, html: str) -> Tuple[bool, Optional[str]]:
        """
        Send an HTML email.

        Returns:
            Tuple of (success, error_message)
        """
        if not self.enabled:
            logger.warning("[EmailService] SMTP not configured - skipping email send")
            return False, "Email service not configured"

        try:
            # SMTP_SECURE=true means direct TLS (465), otherwise STARTTLS (587)
            await aiosmtplib.send(
                self._build_message(to_email, subject, html),
                hostname=self.settings.SMTP_HOST,
                port=self.settings.SMTP_PORT,
                use_tls=self.settings.SMTP_SECURE,
                start_tls=not self.settings.SMTP_SECURE,
                username=self.settings.SMTP_USER,
                password=self.settings.SMTP_PASSWORD,
                timeout=30.0,
            )
        except Exception as e:
            error_msg = f"Failed to send email: {str(e)}"
            logger.error(f"[EmailService] {error_msg}", exc_info=True)
            return False, error_msg

        logger.info(f"[EmailService] Email sent to {to_email}")
        return True, None

    async def send_otp_email(self, to_email: str, code: str, ttl_seconds: int) -> Tuple[bool, Optional[str]]:
        minutes = max(ttl_seconds // 60, 1)
        html = (
            f"<p>Your login code is <strong>{code}</strong>.</p>"
            f"<p>It expires in {minutes} minutes. If you did not request it, ignore this email.</p>"
        )
        return await self.send(to_email, f"{self.settings.APP_NAME} login code", html)
