# =============================================================================
# Email Delivery Integration (AWS SES)
# =============================================================================
#
# Setup:
#   1. Verify your sending email in AWS SES console
#   2. Set env vars:
#      - MAIL_FROM=noreply@yourdomain.com
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-1
#
# Without SES credentials, development builds log the subject and
# recipient instead of sending. Production builds treat missing credentials as a
# delivery failure.
#
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storefront.config import Settings

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """What the resolvers need from a mail transport."""

    async def send_password_reset(self, email: str, reset_token: str) -> bool: ...


# =============================================================================
# Email Templates
# =============================================================================

TEMPLATES = {
    "password_reset": {
        "subject": "Your Password Reset Token",
        "html": """
        <div class="email" style="border: 1px solid black; padding: 20px; font-family: sans-serif; line-height: 2; font-size: 20px;">
            <h2>Hello There!</h2>
            <p>Your Password Reset Token is here!</p>
            <p><a href="{reset_url}">Click Here to Reset</a></p>
            <p>This link expires in {ttl_minutes} minutes.</p>
        </div>
        """,
    },
}


# =============================================================================
# Email Service
# =============================================================================

class EmailService:
    """Send emails via AWS SES."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client = None

    @property
    def client(self):
        """Lazy-load SES client."""
        if self._client is None and self.settings.use_aws:
            self._client = boto3.client(
                "ses",
                region_name=self.settings.aws_region,
                aws_access_key_id=self.settings.aws_access_key_id,
                aws_secret_access_key=self.settings.aws_secret_access_key,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        """Check if email sending is properly configured."""
        return self.settings.use_aws and bool(self.settings.mail_from)

    async def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one message.

        Args:
            to: Recipient email address
            subject: Subject line
            html: HTML body

        Returns:
            True if sent (or skipped in development), False otherwise
        """
        message = {
            "from": self.settings.mail_from or "noreply@localhost",
            "to": to,
            "subject": subject,
            "html": html,
        }

        if not self.is_configured:
            if self.settings.is_production:
                logger.error(f"Email not configured - cannot send '{subject}' to {to}")
                return False
            logger.warning(f"Email not configured - skipping '{subject}' for {to}")
            return True

        try:
            response = self.client.send_email(
                Source=message["from"],
                Destination={"ToAddresses": [message["to"]]},
                Message={
                    "Subject": {"Data": message["subject"], "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": message["html"], "Charset": "UTF-8"},
                    },
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            return False

        logger.info(f"Email sent to {to}: {subject} (MessageId: {response['MessageId']})")
        return True

    async def send_template(self, to: str, template: str, data: dict[str, Any]) -> bool:
        """Render a named template and send it."""
        tpl = TEMPLATES[template]
        return await self.send(to, tpl["subject"], tpl["html"].format(**data))

    async def send_password_reset(self, email: str, reset_token: str) -> bool:
        """Send password reset email."""
        return await self.send_template(
            email,
            "password_reset",
            {
                "reset_url": self.reset_url(reset_token),
                "ttl_minutes": self.settings.reset_token_ttl_minutes,
            },
        )

    def reset_url(self, reset_token: str) -> str:
        return f"{self.settings.frontend_url.rstrip('/')}/reset?resetToken={reset_token}"
