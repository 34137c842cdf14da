"""Built-in email templates.

Each template has a subject, an HTML body and a plain text body, all
rendered with the same variables.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailTemplate:
    subject: str
    html_body: str
    text_body: str


_HTML_LAYOUT_START = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{{ title }}</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f4f4f5;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color: #f4f4f5;">
    <tr>
      <td align="center" style="padding: 40px 20px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width: 480px; background-color: #ffffff; border-radius: 12px;">
          <tr>
            <td align="center" style="padding: 40px 40px 20px 40px;">
              <h1 style="margin: 0; font-size: 24px; font-weight: 600; color: #18181b;">{{ app_name }}</h1>
            </td>
          </tr>
          <tr>
            <td style="padding: 20px 40px 40px 40px;">
              <p style="margin: 0 0 16px 0; font-size: 16px; line-height: 24px; color: #3f3f46;">
                {% if user_name %}Hi {{ user_name }},{% else %}Hi,{% endif %}
              </p>
"""

_HTML_LAYOUT_END = """
            </td>
          </tr>
          <tr>
            <td align="center" style="padding: 0 40px 40px 40px;">
              <p style="margin: 0; font-size: 12px; color: #a1a1aa;">&copy; {{ year }} {{ app_name }}. All rights reserved.</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""

_BUTTON = """
              <table role="presentation" width="100%" cellspacing="0" cellpadding="0">
                <tr>
                  <td align="center" style="padding: 8px 0 24px 0;">
                    <a href="{{ action_url }}" target="_blank" style="display: inline-block; padding: 14px 32px; background-color: #18181b; color: #ffffff; text-decoration: none; font-size: 16px; border-radius: 8px;">__LABEL__</a>
                  </td>
                </tr>
              </table>
              <p style="margin: 0 0 16px 0; font-size: 14px; line-height: 22px; color: #71717a;">
                This link will expire in <strong>{{ expires_in }}</strong>.
              </p>
              <p style="margin: 0 0 24px 0; font-size: 12px; line-height: 20px; color: #a1a1aa; word-break: break-all;">
                If the button doesn't work, copy and paste this link into your browser:<br>{{ action_url }}
              </p>
              <hr style="border: none; border-top: 1px solid #e4e4e7; margin: 24px 0;">
"""


def _button(label: str) -> str:
    return _BUTTON.replace("__LABEL__", label)


PASSWORD_RESET = EmailTemplate(
    subject="Reset Your Password",
    html_body=_HTML_LAYOUT_START
    + """              <p style="margin: 0 0 24px 0; font-size: 16px; line-height: 24px; color: #3f3f46;">
                We received a request to reset your password. Click the button below to choose a new one.
              </p>
"""
    + _button("Reset Password")
    + """              <p style="margin: 0; font-size: 13px; line-height: 20px; color: #a1a1aa;">
                If you didn't request a password reset, you can safely ignore this email. Your password will remain unchanged.
              </p>"""
    + _HTML_LAYOUT_END,
    text_body="""{% if user_name %}Hi {{ user_name }},{% else %}Hi,{% endif %}

We received a request to reset your password.

Click the link below to choose a new password:
{{ action_url }}

This link will expire in {{ expires_in }}.

If you didn't request a password reset, you can safely ignore this email. Your password will remain unchanged.

---
{{ app_name }}
""",
)

EMAIL_VERIFICATION = EmailTemplate(
    subject="{% if is_existing_user %}Action Required: {% endif %}Verify Your Email Address",
    html_body=_HTML_LAYOUT_START
    + """              <p style="margin: 0 0 24px 0; font-size: 16px; line-height: 24px; color: #3f3f46;">
{% if is_existing_user %}
                We've updated our email verification system. Please verify your email address to continue using your account.
{% else %}
                Thank you for creating an account. Please verify your email address to get started.
{% endif %}
              </p>
"""
    + _button("Verify Email")
    + """              <p style="margin: 0; font-size: 13px; line-height: 20px; color: #a1a1aa;">
                If you didn't {% if is_existing_user %}have an account with us{% else %}create an account{% endif %}, you can safely ignore this email.
              </p>"""
    + _HTML_LAYOUT_END,
    text_body="""{% if user_name %}Hi {{ user_name }},{% else %}Hi,{% endif %}

{% if is_existing_user %}
We've updated our email verification system. Please verify your email address to continue using your account.
{% else %}
Thank you for creating an account. Please verify your email address to get started.
{% endif %}

Click the link below to verify your email:
{{ action_url }}

This link will expire in {{ expires_in }}.

If you didn't {% if is_existing_user %}have an account with us{% else %}create an account{% endif %}, you can safely ignore this email.

---
{{ app_name }}
""",
)

TEMPLATES: dict[str, EmailTemplate] = {
    "password_reset": PASSWORD_RESET,
    "email_verification": EMAIL_VERIFICATION,
}
