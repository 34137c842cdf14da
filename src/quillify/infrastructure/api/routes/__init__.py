"""API Routes for Quillify."""

from quillify.infrastructure.api.routes.account_router import router as account_router
from quillify.infrastructure.api.routes.auth_router import router as auth_router
from quillify.infrastructure.api.routes.books_router import router as books_router
from quillify.infrastructure.api.routes.cron_router import router as cron_router
from quillify.infrastructure.api.routes.verify_email_router import (
    router as verify_email_router,
)

__all__ = [
    "account_router",
    "auth_router",
    "books_router",
    "cron_router",
    "verify_email_router",
]
