"""SMTP delivery over aiosmtplib."""

from email.message import EmailMessage

import aiosmtplib
from pydantic import BaseModel, ConfigDict

from quillify.core.logging import get_logger
from quillify.infrastructure.services.email.email_provider import EmailProvider

logger = get_logger(__name__)


class SMTPSettings(BaseModel):
    """Connection and sender settings, built from the ``QUILLIFY_SMTP_*`` variables.

    ``use_ssl`` connects with implicit TLS (usually port 465); ``use_tls``
    upgrades a plain connection with STARTTLS (usually port 587). Login is
    skipped when no username is set, as with a local relay.
    """

    model_config = ConfigDict(from_attributes=True)

    host: str
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = True
    use_ssl: bool = False
    from_email: str
    from_name: str = "Quillify"
    reply_to: str | None = None
    timeout: int = 10


class SMTPProvider(EmailProvider):
    """Sends each message over a fresh SMTP connection."""

    def __init__(self, settings: SMTPSettings) -> None:
        self.settings = settings

    def _build_message(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        sender: str,
        reply_to: str | None,
        category: str | None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = sender
        message["To"] = to
        if reply_to:
            message["Reply-To"] = reply_to
        if category:
            message["X-Category"] = category
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        return message

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
        settings = self.settings
        message = self._build_message(
            to,
            subject,
            html_body,
            text_body,
            sender=f"{from_name or settings.from_name} <{from_email or settings.from_email}>",
            reply_to=reply_to or settings.reply_to,
            category=category,
        )

        # aiosmtplib's use_tls is implicit TLS, not STARTTLS
        client = aiosmtplib.SMTP(
            hostname=settings.host,
            port=settings.port,
            use_tls=settings.use_ssl,
            start_tls=settings.use_tls and not settings.use_ssl,
            timeout=settings.timeout,
        )
        try:
            async with client:
                if settings.username:
                    await client.login(settings.username, settings.password)
                await client.send_message(message)
        except aiosmtplib.SMTPException as e:
            logger.error(
                "SMTP delivery failed",
                host=settings.host,
                port=settings.port,
                to=to,
                category=category,
                error=str(e),
            )
            raise

        logger.info("Email sent via SMTP", to=to, category=category)
        return True
