"""``quillify`` command line.

Runs the API server and the maintenance jobs that operators run by hand or
from a scheduler: creating tables, purging expired tokens and mailing
verification links to accounts that predate email verification.
"""

import asyncio
import sys
from typing import NoReturn

import click

from quillify.core.config import Settings, get_settings
from quillify.core.logging import LoggingContext, configure_logging, get_logger


def _load_settings() -> Settings:
    settings = get_settings()
    configure_logging(settings)
    return settings


@click.group()
@click.version_option(version="0.1.0", prog_name="Quillify")
def cli() -> None:
    """Quillify - personal book tracking.

    Settings are read from QUILLIFY_* environment variables and .env.
    """


@cli.command()
@click.option("--host", default=None, help="Interface to bind (default: QUILLIFY_HOST)")
@click.option("--port", type=int, default=None, help="Port to bind (default: QUILLIFY_PORT)")
@click.option("--workers", type=int, default=None, help="Worker processes (default: QUILLIFY_WORKERS)")
@click.option("--reload/--no-reload", default=None, help="Reload on code changes (default: on in development)")
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    workers = workers or settings.workers
    if workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            f"Error: SQLite does not support multiple worker processes (requested {workers}). "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)
    if reload is None:
        reload = settings.is_development
    if reload:
        # uvicorn runs a single process while reloading
        workers = 1

    options = {
        "host": host or settings.host,
        "port": port or settings.port,
        "workers": workers,
        "reload": reload,
    }
    get_logger(__name__).info("Starting Quillify server", environment=settings.environment, **options)
    uvicorn.run(
        "quillify.infrastructure.api.app:app",
        log_level=settings.log_level.lower(),
        access_log=True,
        **options,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Do not ask for confirmation; required in production")
def init_db(force: bool) -> None:
    """Create the database tables."""
    from quillify.infrastructure.persistence.database import get_db_manager, init_database

    settings = _load_settings()
    if settings.is_production and not force:
        click.echo("ERROR: Running in production mode. Pass --force to continue.", err=True)
        raise SystemExit(1)
    if not force:
        click.confirm("This will create all database tables. Continue?", abort=True)

    async def run() -> None:
        db = get_db_manager()
        try:
            await init_database()
            # init_database leaves production schemas alone
            if settings.is_production:
                await db.create_tables()
        finally:
            await db.disconnect()

    asyncio.run(run())
    click.echo("Database initialized successfully.")


@cli.command()
def cleanup_tokens() -> None:
    """Delete expired password reset and email verification tokens."""
    from quillify.domain.services import (
        EmailVerificationService,
        PasswordResetService,
        cleanup_expired_tokens,
    )
    from quillify.infrastructure.persistence.database import get_db_manager
    from quillify.infrastructure.persistence.repositories import (
        EmailVerificationRepository,
        PasswordResetRepository,
        UserRepository,
    )
    from quillify.infrastructure.services.email.console_provider import ConsoleProvider
    from quillify.infrastructure.services.email_service import EmailService

    settings = _load_settings()
    # Cleanup sends nothing; the console provider keeps the services' mailer offline.
    mailer = EmailService(provider=ConsoleProvider(), settings=settings)

    async def run():
        db = get_db_manager()
        try:
            async with db.session() as session:
                users = UserRepository(session)
                return await cleanup_expired_tokens(
                    PasswordResetService(session, users, PasswordResetRepository(session), mailer),
                    EmailVerificationService(
                        session, users, EmailVerificationRepository(session), mailer
                    ),
                )
        finally:
            await db.disconnect()

    result = asyncio.run(run())
    click.echo(
        f"Deleted {result.deleted_count} expired tokens "
        f"({result.password_reset} password reset, "
        f"{result.email_verification} email verification)."
    )


@cli.command()
@click.option("--dry-run", is_flag=True, help="Only list who would be mailed; issue no tokens")
@click.option("--delay", type=float, default=0.5, show_default=True, help="Pause between emails, in seconds")
def send_verification(dry_run: bool, delay: float) -> None:
    """Mail a fresh verification link to every unverified user.

    Uses the wording for accounts created before verification was required.
    Exits with status 1 if any email could not be sent.
    """
    from quillify.domain.exceptions import NotFoundError, QuillifyError
    from quillify.domain.services import EmailVerificationService
    from quillify.infrastructure.persistence.database import get_db_manager
    from quillify.infrastructure.persistence.repositories import (
        EmailVerificationRepository,
        UserRepository,
    )
    from quillify.infrastructure.services.email_service import EmailService

    _load_settings()
    logger = get_logger(__name__)

    async def run() -> int:
        db = get_db_manager()
        sent = failed = 0
        try:
            async with db.session() as session:
                users = UserRepository(session)
                pending = await users.list_unverified()
                if not pending:
                    click.echo("No unverified users found.")
                    return 0

                click.echo(f"Found {len(pending)} unverified users.")
                if dry_run:
                    for user in pending:
                        click.echo(f"[DRY-RUN] Would send verification email to {user.email}")
                    return 0

                service = EmailVerificationService(
                    session, users, EmailVerificationRepository(session), EmailService()
                )
                # A failed issue rolls the session back and expires every loaded
                # user, so each one is reloaded by id before use.
                targets = [(user.id, user.email) for user in pending]
                for index, (user_id, email) in enumerate(targets):
                    if index and delay > 0:
                        await asyncio.sleep(delay)
                    try:
                        with LoggingContext(user_id=user_id, command="send-verification"):
                            user = await users.get_by_id(user_id)
                            if user is None:
                                raise NotFoundError("User no longer exists")
                            await service.send_verification(user, existing_user=True)
                    except QuillifyError as e:
                        failed += 1
                        logger.error("Verification email failed", user_id=user_id, error=e.message)
                        click.echo(f"[ERROR] {email}: {e.message}", err=True)
                        continue
                    sent += 1
                    click.echo(f"[OK] {email}")
        finally:
            await db.disconnect()

        click.echo(f"Sent: {sent}  Failed: {failed}  Total: {len(pending)}")
        return 1 if failed else 0

    raise SystemExit(asyncio.run(run()))


def _info_sections(settings: Settings) -> list[tuple[str, list[tuple[str, object]]]]:
    from sqlalchemy.engine import make_url

    database = make_url(settings.database_url).render_as_string(hide_password=True)
    return [
        (
            "Configuration",
            [
                ("Environment", settings.environment),
                ("Debug", settings.debug),
                ("API Prefix", settings.api_prefix),
                ("App URL", settings.app_url),
            ],
        ),
        ("Server", [("Host", settings.host), ("Port", settings.port), ("Workers", settings.workers)]),
        ("Database", [("URL", database), ("Echo", settings.db_echo)]),
        (
            "Security",
            [
                ("Session", f"{settings.session_expire_hours} hours"),
                ("Remember Me", f"{settings.remember_me_expire_days} days"),
                ("bcrypt Cost", settings.bcrypt_rounds),
                ("Cron Secret", "set" if settings.cron_secret else "not set"),
            ],
        ),
        (
            "Tokens",
            [
                ("Reset", f"{settings.password_reset_token_expire_minutes} minutes"),
                ("Verification", f"{settings.email_verification_token_expire_hours} hours"),
            ],
        ),
        (
            "Email",
            [
                ("Provider", settings.email_provider),
                ("From", f"{settings.mail_from_name} <{settings.mail_from_address}>"),
            ],
        ),
        ("Logging", [("Level", settings.log_level), ("Format", settings.log_format)]),
    ]


@cli.command()
def info() -> None:
    """Show the effective configuration."""
    settings = get_settings()
    click.echo(f"Quillify v{settings.app_version}")
    click.echo("=" * 40)
    for title, rows in _info_sections(settings):
        click.echo(f"\n{title}:")
        for label, value in rows:
            click.echo(f"  {label + ':':<14}{value}")


def main() -> NoReturn:
    """Entry point for the ``quillify`` script and ``python -m quillify``."""
    cli()
    sys.exit(0)


if __name__ == "__main__":
    main()
