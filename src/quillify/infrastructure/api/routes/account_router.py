"""Account management API routes.

Every endpoint requires a session. Email and password changes are gated on
the current password.
"""

from fastapi import APIRouter, Response

from quillify.core.logging import get_logger
from quillify.infrastructure.api.dependencies import (
    SESSION_TOKEN_HEADER,
    Credentials,
    CurrentSession,
    Issuer,
)
from quillify.infrastructure.api.routes.auth_router import to_user_response
from quillify.infrastructure.api.schemas import (
    ErrorResponse,
    MessageResponse,
    UpdateEmailRequest,
    UpdateNameRequest,
    UpdatePasswordRequest,
    UserResponse,
)

logger = get_logger(__name__)

router = APIRouter()

_GATED_RESPONSES = {
    400: {"model": ErrorResponse, "description": "No password on the account or weak password"},
    401: {"model": ErrorResponse, "description": "Current password is incorrect"},
    404: {"model": ErrorResponse, "description": "User not found"},
}


@router.get("/me", response_model=UserResponse)
async def get_me(claims: CurrentSession, credentials: Credentials) -> UserResponse:
    user = await credentials.get_user(claims.user_id)
    return to_user_response(user)


@router.patch("/name", response_model=UserResponse)
async def update_name(
    request: UpdateNameRequest, claims: CurrentSession, credentials: Credentials
) -> UserResponse:
    user = await credentials.update_name(claims.user_id, request.name)
    return to_user_response(user)


@router.patch(
    "/email",
    response_model=UserResponse,
    responses={**_GATED_RESPONSES, 409: {"model": ErrorResponse, "description": "Email taken"}},
)
async def update_email(
    request: UpdateEmailRequest,
    response: Response,
    claims: CurrentSession,
    credentials: Credentials,
    issuer: Issuer,
) -> UserResponse:
    """Change the account email.

    The session is re-signed with the new address (same expiry) and returned
    in the ``X-Session-Token`` header.
    """
    user = await credentials.update_email(
        claims.user_id, request.new_email, request.current_password
    )
    if user.email != claims.email:
        refreshed = claims.model_copy(update={"email": user.email})
        response.headers[SESSION_TOKEN_HEADER] = issuer.encode(refreshed)
    return to_user_response(user)


@router.patch("/password", response_model=MessageResponse, responses=_GATED_RESPONSES)
async def update_password(
    request: UpdatePasswordRequest, claims: CurrentSession, credentials: Credentials
) -> MessageResponse:
    await credentials.update_password(
        claims.user_id, request.current_password, request.new_password
    )
    return MessageResponse(message="Password updated successfully")
