"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class UserResponse(BaseModel):
    """Public view of a user (no password hash, no tokens)."""
    id: str = Field(..., description="User ID (MongoDB _id)")
    email: str = Field(..., description="User email")
    name: str = Field(..., description="Display name")
    is_verified: bool = Field(False, description="Whether the email address was confirmed")
    created_at: datetime = Field(..., description="Account creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    last_login: Optional[datetime] = Field(None, description="Last login timestamp")


class RegisterRequest(BaseModel):
    """Request model for user registration."""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """Request model for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1, description="Password is required")


class TokenResponse(BaseModel):
    """Signed session token returned on login."""
    token: str


class RecoverRequest(BaseModel):
    """Request model for starting password recovery."""
    email: EmailStr


class ResendVerificationRequest(BaseModel):
    """Request model for sending the verification link again."""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request model for committing a new password through a reset token."""
    password: str = Field(..., min_length=6, max_length=128, description="At least 6 chars long")


class MessageResponse(BaseModel):
    msg: str
