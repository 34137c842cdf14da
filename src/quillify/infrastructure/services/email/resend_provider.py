"""Resend delivery through the Resend Python SDK.

The SDK is blocking, so each call runs in a worker thread.
"""

import asyncio
from typing import Any

import resend
from pydantic import BaseModel, ConfigDict

from quillify.core.logging import get_logger
from quillify.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class ResendSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    api_key: str
    from_email: str
    from_name: str = "Quillify"
    reply_to: str | None = None


def _failure_reason(error: Exception) -> str:
    text = str(error).lower()
    if "invalid api key" in text or "unauthorized" in text:
        return "authentication"
    if "rate limit" in text:
        return "rate_limited"
    if "not verified" in text:
        return "unverified_domain"
    return "api_error"


class ResendProvider(EmailProvider):
    """Sends mail through the Resend API.

    Token emails are tagged with their category (``password_reset`` or
    ``email_verification``) so they can be told apart in the Resend dashboard.
    """

    def __init__(self, settings: ResendSettings) -> None:
        self.settings = settings
        resend.api_key = settings.api_key

    def _payload(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        sender: str,
        reply_to: str | None,
        category: str | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }
        if reply_to:
            payload["reply_to"] = reply_to
        if category:
            payload["tags"] = [{"name": "category", "value": category}]
        return payload

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: str | None = None,
        category: str | None = None,
    ) -> bool:
        """Hand one message to Resend.

        Raises:
            Exception: Whatever the SDK raised; the failure is logged with a
                coarse reason first.
        """
        sender_address = from_email or self.settings.from_email
        sender = f"{from_name or self.settings.from_name} <{sender_address}>"
        payload = self._payload(
            to,
            subject,
            html_body,
            text_body,
            sender,
            reply_to or self.settings.reply_to,
            category,
        )

        try:
            response = await asyncio.to_thread(resend.Emails.send, payload)
        except Exception as e:
            logger.error(
                "Resend rejected email",
                reason=_failure_reason(e),
                to=to,
                sender=sender_address,
                category=category,
                error=str(e),
            )
            raise

        logger.info("Email sent via Resend", email_id=response.get("id"), to=to, category=category)
        return True
