"""Pydantic schemas for account endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from zyra.common.schemas import CamelModel


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserOut(CamelModel):
    id: str
    email: str
    full_name: str
    plan: str
    role: str = "user"
    preferred_language: Optional[str] = None
    image_url: Optional[str] = None
    trial_end_date: Optional[datetime] = None


class UserEnvelope(CamelModel):
    user: UserOut


class UpdateProfileRequest(CamelModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    preferred_language: Optional[str] = Field(None, min_length=2, max_length=10)
    image_url: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)
