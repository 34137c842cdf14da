"""Pydantic schemas for account management endpoints."""

from pydantic import BaseModel, EmailStr, Field


class UpdateNameRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=255, description="New display name")


class UpdateEmailRequest(BaseModel):
    """Request body for changing the account email."""

    new_email: EmailStr = Field(..., description="New email address")
    current_password: str = Field(..., min_length=1, description="Current password")


class UpdatePasswordRequest(BaseModel):
    """Request body for changing the account password."""

    current_password: str = Field(..., min_length=1, description="Current password")
    new_password: str = Field(..., min_length=1, description="New password")
