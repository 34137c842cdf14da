"""Console email provider.

Writes outgoing mail to the log instead of delivering it. Used in
development and tests.
"""

from quillify.core.logging import get_logger
from quillify.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class ConsoleProvider(EmailProvider):
    """Logs every message it is asked to send."""

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
        logger.info(
            f"[EMAIL] {subject}\n"
            f"From: {from_name} <{from_email}>\n"
            f"To: {to}\n"
            f"Body:\n{text_body}\n"
            f"{'=' * 80}",
            to=to,
            category=category,
        )
        return True
