"""Email verification link target.

The link in the verification email points here. The outcome is reported by
redirecting to the web app's verification page.
"""

from urllib.parse import urlencode

from fastapi import APIRouter, Query, status
from fastapi.responses import RedirectResponse

from quillify.core.config import get_settings
from quillify.core.logging import get_logger
from quillify.domain.exceptions import InternalError, TokenExpiredError, TokenNotFoundError
from quillify.infrastructure.api.dependencies import EmailVerifications

logger = get_logger(__name__)

router = APIRouter()


def verification_redirect(status_value: str, email: str | None = None) -> RedirectResponse:
    params = {"status": status_value}
    if email:
        params["email"] = email
    url = f"{get_settings().app_url}/account/verify-email?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/verify-email", response_class=RedirectResponse, status_code=307)
async def verify_email(
    verifications: EmailVerifications,
    token: str | None = Query(None, description="Verification token from the emailed link"),
) -> RedirectResponse:
    """Consume a verification token and redirect with the outcome.

    Redirects to ``status=success``, ``status=expired`` (with the account
    email so the page can offer a new link) or ``status=invalid``. A store
    failure redirects to ``status=error`` and leaves the token usable.
    """
    if not token:
        return verification_redirect("invalid")

    try:
        await verifications.verify_email(token)
    except TokenExpiredError as e:
        return verification_redirect("expired", e.email)
    except TokenNotFoundError as e:
        logger.info("Email verification link rejected", error=e.message)
        return verification_redirect("invalid")
    except InternalError as e:
        logger.error("Email verification failed", error=e.message)
        return verification_redirect("error")

    return verification_redirect("success")
