"""Authentication schemas."""

from __future__ import annotations  # Enable forward references

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Register request schema."""

    email: EmailStr
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    name: str = Field(..., min_length=1, max_length=255)
    role: Literal["job_seeker", "employer"] = "job_seeker"


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class OtpRequest(BaseModel):
    """Login code request."""

    email: EmailStr


class OtpVerifyRequest(BaseModel):
    """Login code verification."""

    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str
    token_type: str = "bearer"
    user: "UserResponse"


class UserResponse(BaseModel):
    """User response schema."""

    id: int
    email: str
    name: Optional[str] = None
    role: str
    is_active: bool
    is_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Rebuild models to resolve forward references
TokenResponse.model_rebuild()
