"""Pydantic schemas for authentication endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request body for registration."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    name: str | None = Field(
        None, min_length=2, max_length=255, description="Optional display name"
    )


class LoginRequest(BaseModel):
    """Request body for sign-in."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    remember_me: bool = Field(False, description="Keep the session for 30 days")


class UserResponse(BaseModel):
    """Public user information. Never includes the password hash."""

    id: str = Field(..., description="User ID")
    email: str | None = Field(..., description="User's email address")
    name: str | None = Field(None, description="Display name")
    email_verified: bool = Field(..., description="Whether the email has been verified")
    email_verified_at: datetime | None = Field(None, description="When the email was verified")
    created_at: datetime | None = Field(None, description="When the user was created")

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    """Response for successful registration."""

    user: UserResponse
    verification_email_sent: bool = Field(
        ..., description="Whether the verification email went out"
    )


class SessionResponse(BaseModel):
    """Claims of the current session."""

    user_id: str
    email: str | None
    email_verified: bool
    remember_me: bool
    issued_at: datetime
    expires_at: datetime

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    """Response for successful sign-in."""

    token: str = Field(..., description="Session token (send as Bearer)")
    expires_at: datetime = Field(..., description="When the session expires")
    user: UserResponse
    session: SessionResponse


class CheckEmailResponse(BaseModel):
    exists: bool


class EmailRequest(BaseModel):
    """Request body carrying a single email address."""

    email: EmailStr = Field(..., description="Email address")


class ResetPasswordRequest(BaseModel):
    """Request body for completing a password reset."""

    token: str = Field(..., min_length=1, description="Reset token from the emailed link")
    password: str = Field(..., min_length=1, description="New password")


class TokenValidationResponse(BaseModel):
    """Result of checking a reset token without consuming it."""

    valid: bool
    expired: bool = False
    message: str | None = None


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Body of every domain error response."""

    error: str = Field(..., description="Error kind")
    message: str = Field(..., description="Human-readable error message")
    details: list[dict] | None = Field(None, description="Field-level details")
