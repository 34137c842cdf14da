"""Quillify ASGI application.

``create_app`` wires CORS, request logging, the domain error handlers and the
routers under ``QUILLIFY_API_PREFIX``. The module-level ``app`` is what
``quillify serve`` hands to uvicorn.
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quillify.core.config import Settings, get_settings
from quillify.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from quillify.domain.exceptions import ErrorKind, QuillifyError
from quillify.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe; never touches the database."""
    return {"status": "healthy", "service": "Quillify", "version": get_settings().app_version}


@health_router.get("/ready", response_model=None)
async def ready() -> dict[str, str] | JSONResponse:
    """Readiness probe; 503 while the database is unreachable."""
    if not await get_db_manager().check_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "service": "Quillify", "database": "disconnected"},
        )
    return {"status": "ready", "service": "Quillify", "database": "connected"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting Quillify",
        version=settings.app_version,
        environment=settings.environment,
        email_provider=settings.email_provider,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    await close_database()
    logger.info("Quillify stopped")


def error_response(exc: QuillifyError) -> JSONResponse:
    """Render a domain error as ``{"error", "message", "details"?}``."""
    content: dict[str, Any] = {"error": exc.kind.value, "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    headers = {"WWW-Authenticate": "Bearer"} if exc.kind is ErrorKind.UNAUTHORIZED else None
    return JSONResponse(status_code=ERROR_STATUS[exc.kind], content=content, headers=headers)


async def handle_domain_error(request: Request, exc: QuillifyError) -> JSONResponse:
    # Expected failures (bad credentials, expired tokens) are not errors for the server.
    log = logger.error if exc.kind is ErrorKind.INTERNAL_ERROR else logger.info
    log(
        "Request failed",
        method=request.method,
        path=request.url.path,
        error_kind=exc.kind.value,
        error=exc.message,
    )
    return error_response(exc)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        exc_type=type(exc).__name__,
        error=str(exc),
    )
    message = str(exc) if get_settings().debug else "An unexpected error occurred"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": ErrorKind.INTERNAL_ERROR.value, "message": message},
    )


async def correlate_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag every log entry of a request, and its response, with a correlation ID."""
    correlation_id = request.headers.get("X-Correlation-ID") or f"cid_{uuid.uuid4().hex[:12]}"
    bind_correlation_id(correlation_id)
    logger.info("Request started", method=request.method, path=request.url.path)
    try:
        response = await call_next(request)
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        response.headers["X-Correlation-ID"] = correlation_id
        return response
    finally:
        clear_context()


def include_routers(app: FastAPI, settings: Settings) -> None:
    from quillify.infrastructure.api.routes import (
        account_router,
        auth_router,
        books_router,
        cron_router,
        verify_email_router,
    )

    prefix = settings.api_prefix
    app.include_router(health_router)
    app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(account_router, prefix=f"{prefix}/account", tags=["account"])
    app.include_router(verify_email_router, prefix=prefix, tags=["auth"])
    app.include_router(books_router, prefix=f"{prefix}/books", tags=["books"])
    app.include_router(cron_router, prefix=f"{prefix}/cron", tags=["cron"])


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application. Interactive docs are served in development only."""
    settings = settings or get_settings()
    docs = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Personal book tracking with email/password accounts",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        # Browsers only let scripts read these when listed.
        expose_headers=["X-Session-Token", "X-Correlation-ID"],
    )
    app.middleware("http")(correlate_requests)
    app.add_exception_handler(QuillifyError, handle_domain_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    include_routers(app, settings)
    return app


app = create_app()
