"""Pydantic schemas for API request/response validation."""

from quillify.infrastructure.api.schemas.account_schemas import (
    UpdateEmailRequest,
    UpdateNameRequest,
    UpdatePasswordRequest,
)
from quillify.infrastructure.api.schemas.auth_schemas import (
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
from quillify.infrastructure.api.schemas.book_schemas import (
    BookCreateRequest,
    BookListResponse,
    BookResponse,
    BookStatsResponse,
    BookUpdateRequest,
    GenresResponse,
    SetReadRequest,
)

__all__ = [
    "BookCreateRequest",
    "BookListResponse",
    "BookResponse",
    "BookStatsResponse",
    "BookUpdateRequest",
    "CheckEmailResponse",
    "EmailRequest",
    "ErrorResponse",
    "GenresResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "RegisterResponse",
    "ResetPasswordRequest",
    "SessionResponse",
    "SetReadRequest",
    "TokenValidationResponse",
    "UpdateEmailRequest",
    "UpdateNameRequest",
    "UpdatePasswordRequest",
    "UserResponse",
]
