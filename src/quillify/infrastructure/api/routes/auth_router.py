"""Authentication API routes.

Provides endpoints for registration, sign-in, sessions, password resets and
verification emails.
"""

from fastapi import APIRouter, Query, status
from pydantic import EmailStr

from quillify.core.logging import get_logger
from quillify.domain.entities import PublicUser
from quillify.domain.exceptions import (
    EmailDeliveryError,
    InternalError,
    TokenExpiredError,
    TokenNotFoundError,
)
from quillify.infrastructure.api.dependencies import (
    Credentials,
    CurrentSession,
    EmailVerifications,
    Issuer,
    PasswordResets,
)
from quillify.infrastructure.api.schemas import (
    CheckEmailResponse,
    EmailRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    TokenValidationResponse,
    UserResponse,
)

logger = get_logger(__name__)

router = APIRouter()


def to_user_response(user) -> UserResponse:
    return UserResponse.model_validate(PublicUser.from_record(user))


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisterResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Password does not meet the policy"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)
async def register(
    request: RegisterRequest,
    credentials: Credentials,
    verifications: EmailVerifications,
) -> RegisterResponse:
    """Create an unverified account and send a verification email.

    Delivery of the verification email is best-effort: the account exists
    either way and the user can ask for a new link later.
    """
    user = await credentials.register(request.email, request.password, request.name)
    # Built before issuing: a failed token commit expires the instance.
    created = to_user_response(user)

    sent = False
    try:
        issued = await verifications.send_verification(user)
        sent = issued.delivered
    except (EmailDeliveryError, InternalError) as e:
        logger.warning(
            "Verification email not sent after registration",
            user_id=created.id,
            error=e.message,
        )

    return RegisterResponse(user=created, verification_email_sent=sent)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Account has no password"},
        401: {"model": ErrorResponse, "description": "Invalid email or password"},
    },
)
async def login(
    request: LoginRequest,
    credentials: Credentials,
    issuer: Issuer,
) -> LoginResponse:
    """Sign in with email and password.

    Unverified users can sign in; the session records their verification state.
    """
    user = await credentials.verify_credentials(request.email, request.password)
    token, claims = issuer.issue(user, remember_me=request.remember_me)

    return LoginResponse(
        token=token,
        expires_at=claims.expires_at,
        user=to_user_response(user),
        session=SessionResponse.model_validate(claims),
    )


@router.get("/check-email", response_model=CheckEmailResponse)
async def check_email(
    credentials: Credentials,
    email: EmailStr = Query(..., description="Email address to look up"),
) -> CheckEmailResponse:
    return CheckEmailResponse(exists=await credentials.check_email(email))


@router.get(
    "/session",
    response_model=SessionResponse,
    responses={401: {"model": ErrorResponse, "description": "Missing or invalid session"}},
)
async def get_session(claims: CurrentSession) -> SessionResponse:
    """Return the current session.

    If the email was verified after the session was signed, the refreshed
    token is returned in the ``X-Session-Token`` header.
    """
    return SessionResponse.model_validate(claims)


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: EmailRequest, resets: PasswordResets) -> MessageResponse:
    """Email a password reset link.

    The response is the same whether or not the email is registered.
    """
    await resets.request_reset(request.email)
    return MessageResponse(
        message="If an account exists with that email, you will receive a password reset link shortly."
    )


@router.get("/reset-password/validate", response_model=TokenValidationResponse)
async def validate_reset_token(
    resets: PasswordResets,
    token: str = Query("", description="Reset token from the emailed link"),
) -> TokenValidationResponse:
    """Check a reset token without using it."""
    try:
        await resets.validate(token)
    except TokenExpiredError as e:
        return TokenValidationResponse(valid=False, expired=True, message=e.message)
    except TokenNotFoundError as e:
        return TokenValidationResponse(valid=False, expired=False, message=e.message)
    return TokenValidationResponse(valid=True)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Weak password or expired token"},
        404: {"model": ErrorResponse, "description": "Unknown or used token"},
    },
)
async def reset_password(
    request: ResetPasswordRequest, resets: PasswordResets
) -> MessageResponse:
    await resets.reset_password(request.token, request.password)
    return MessageResponse(
        message="Password has been reset successfully. You can now log in with your new password."
    )


@router.post(
    "/send-verification",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse, "description": "Email already verified"}},
)
async def send_verification(
    request: EmailRequest, verifications: EmailVerifications
) -> MessageResponse:
    """Send a new verification link to an unverified address."""
    await verifications.resend(request.email)
    return MessageResponse(
        message="If an account exists with that email, a verification link has been sent."
    )
