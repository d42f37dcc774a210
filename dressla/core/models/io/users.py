"""
User I/O models for authentication, profile and verification endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from dressla.core.models.domain.enums import Role, VerificationStatus


class UserRead(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    email: str
    role: Role
    phone: Optional[str] = None
    image: Optional[str] = None
    iban: Optional[str] = None
    verified: bool
    blocked: bool
    banned: bool
    created_at: datetime


class RegistrationCodeRequest(BaseModel):
    email: EmailStr


class SignupRequest(BaseModel):
    name: str = Field(min_length=2, description="Display name")
    email: EmailStr
    password: str = Field(min_length=6)
    phone: Optional[str] = None
    code: Optional[str] = Field(default=None, description="Registration code e-mailed to the user")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    image: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=6)


class VerificationUpdate(BaseModel):
    id_front_url: Optional[str] = None
    id_back_url: Optional[str] = None
    entrepreneur_certificate_url: Optional[str] = None
    iban: Optional[str] = None


class VerificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    id_front_url: Optional[str] = None
    id_back_url: Optional[str] = None
    entrepreneur_certificate_url: Optional[str] = None
    identity_status: VerificationStatus
    identity_comment: Optional[str] = None
    entrepreneur_status: VerificationStatus
    entrepreneur_comment: Optional[str] = None
    updated_at: datetime


class CookieConsent(BaseModel):
    essential: bool
    performance: bool
    functional: bool
    targeting: bool
    analytics: bool


class CookieConsentRead(CookieConsent):
    timestamp: datetime
