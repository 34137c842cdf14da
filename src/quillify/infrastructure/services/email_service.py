"""Email service for sending transactional emails.

Wraps the configured provider and the built-in templates. Provider failures
are logged and reported as ``False``; callers decide whether that is fatal.
"""

from datetime import datetime, timezone
from typing import Any

from jinja2 import TemplateError

from quillify.core.config import Settings, get_settings
from quillify.core.logging import get_logger
from quillify.infrastructure.services.email.console_provider import ConsoleProvider
from quillify.infrastructure.services.email.email_provider import EmailProvider
from quillify.infrastructure.services.email.resend_provider import (
    ResendProvider,
    ResendSettings,
)
from quillify.infrastructure.services.email.smtp_provider import SMTPProvider, SMTPSettings
from quillify.infrastructure.services.email.template_renderer import get_template_renderer
from quillify.infrastructure.services.email.templates import TEMPLATES

logger = get_logger(__name__)


def create_provider(settings: Settings) -> EmailProvider:
    """Build the provider selected by ``email_provider``.

    Raises:
        ValueError: If the selected provider is missing required settings.
    """
    if settings.email_provider == "smtp":
        return SMTPProvider(
            SMTPSettings(
                host=settings.smtp_host,
                port=settings.smtp_port,
                username=settings.smtp_username,
                password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                use_ssl=settings.smtp_use_ssl,
                from_email=settings.mail_from_address,
                from_name=settings.mail_from_name,
                reply_to=settings.mail_reply_to,
                timeout=settings.smtp_timeout,
            )
        )
    if settings.email_provider == "resend":
        if not settings.resend_api_key:
            raise ValueError("QUILLIFY_RESEND_API_KEY is required for the resend provider")
        return ResendProvider(
            ResendSettings(
                api_key=settings.resend_api_key,
                from_email=settings.mail_from_address,
                from_name=settings.mail_from_name,
                reply_to=settings.mail_reply_to,
            )
        )
    return ConsoleProvider()


class EmailService:
    """Service for sending emails."""

    def __init__(
        self,
        provider: EmailProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the email service.

        Args:
            provider: Provider to deliver through. Defaults to the configured one.
            settings: Application settings (sender identity, app name).
        """
        self.settings = settings or get_settings()
        self.provider = provider or create_provider(self.settings)

    async def send(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        category: str | None = None,
    ) -> bool:
        """Send a rendered email.

        Args:
            to: Recipient email address.
            subject: Subject line.
            html_body: HTML body.
            text_body: Plain text body.
            category: Optional provider tag.

        Returns:
            True if the provider accepted the message, False otherwise.
        """
        try:
            sent = await self.provider.send_email(
                to=to,
                subject=subject,
                html_body=html_body,
                text_body=text_body,
                from_email=self.settings.mail_from_address,
                from_name=self.settings.mail_from_name,
                reply_to=self.settings.mail_reply_to,
                category=category,
            )
        except Exception as e:
            logger.error(
                "Email delivery failed",
                to=to,
                category=category,
                provider=type(self.provider).__name__,
                error=str(e),
            )
            return False

        if not sent:
            logger.warning("Email provider rejected message", to=to, category=category)
        return sent

    async def send_template(
        self,
        template_type: str,
        to: str,
        variables: dict[str, Any],
        category: str | None = None,
    ) -> bool:
        """Render a built-in template and send it.

        Args:
            template_type: Key into the built-in templates.
            to: Recipient email address.
            variables: Template variables (``action_url``, ``expires_in``, ...).
            category: Optional provider tag, defaults to the template type.

        Returns:
            True if the email was sent, False if rendering or delivery failed.

        Raises:
            KeyError: If the template type is unknown.
        """
        template = TEMPLATES[template_type]
        context: dict[str, Any] = {
            "app_name": self.settings.app_name,
            "year": datetime.now(timezone.utc).year,
            "user_name": None,
            "is_existing_user": False,
            **variables,
        }
        try:
            subject = get_template_renderer(html=False).render(template.subject, context)
            context.setdefault("title", subject)
            html_body = get_template_renderer(html=True).render(template.html_body, context)
            text_body = get_template_renderer(html=False).render(template.text_body, context)
        except TemplateError as e:
            logger.error("Email template rendering failed", template_type=template_type, error=str(e))
            return False

        return await self.send(
            to=to,
            subject=subject,
            html_body=html_body,
            text_body=text_body,
            category=category or template_type,
        )


_email_service: EmailService | None = None


def get_email_service() -> EmailService:
    """Get the application-wide email service (FastAPI dependency)."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
