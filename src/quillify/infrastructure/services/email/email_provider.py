"""Mail transport interface.

The email service renders messages; a provider only moves them. Console,
SMTP and Resend transports are selected by ``QUILLIFY_EMAIL_PROVIDER``.
"""

from abc import ABC, abstractmethod


class EmailProvider(ABC):
    """A way of delivering an already rendered message."""

    @abstractmethod
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
        """Deliver one message.

        Args:
            to: Recipient address.
            subject: Rendered subject line.
            html_body: Rendered HTML body.
            text_body: Rendered plain text body.
            from_email: Sender address.
            from_name: Sender display name.
            reply_to: Optional reply-to address.
            category: Tag naming the kind of message, e.g. ``password_reset``.

        Returns:
            True if the transport accepted the message.

        Raises:
            Exception: Transport errors are not swallowed here; the email
                service logs them and reports the send as failed.
        """
