"""
User account entity models.

Tables:
- users: marketplace accounts (buyers, sellers, admins and support staff)
- verification_documents: identity and entrepreneur documents uploaded by sellers
- registration_codes: one-time e-mail codes issued before signup
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import Field

from dressla.core.models.domain.enums import Role, VerificationStatus

from ..base import Base, utc_now


def _new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base, table=True):
    """Marketplace account.

    ``verified`` is set once an admin approves the identity document. ``blocked``
    is raised automatically when an unverified seller crosses the revenue
    threshold and cleared when the entrepreneur document is approved.
    ``banned`` is a manual moderation flag that prevents login.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=_new_user_id, primary_key=True, max_length=32)
    name: Optional[str] = Field(default=None, max_length=255)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: Optional[str] = Field(default=None, max_length=255)
    role: Role = Field(default=Role.USER)
    phone: Optional[str] = Field(default=None, max_length=64)
    image: Optional[str] = Field(default=None)
    iban: Optional[str] = Field(default=None, max_length=64)

    verified: bool = Field(default=False)
    blocked: bool = Field(default=False)
    banned: bool = Field(default=False)
    ban_reason: Optional[str] = Field(default=None)

    cookie_consent_essential: bool = Field(default=True)
    cookie_consent_performance: bool = Field(default=False)
    cookie_consent_functional: bool = Field(default=False)
    cookie_consent_targeting: bool = Field(default=False)
    cookie_consent_analytics: bool = Field(default=False)
    cookie_consent_timestamp: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class VerificationDocument(Base, table=True):
    """Seller verification documents and their review state.

    Table: verification_documents
    """

    __tablename__ = "verification_documents"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="users.id", unique=True, index=True)

    id_front_url: Optional[str] = Field(default=None)
    id_back_url: Optional[str] = Field(default=None)
    entrepreneur_certificate_url: Optional[str] = Field(default=None)

    identity_status: VerificationStatus = Field(default=VerificationStatus.PENDING)
    identity_comment: Optional[str] = Field(default=None)
    entrepreneur_status: VerificationStatus = Field(default=VerificationStatus.PENDING)
    entrepreneur_comment: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return (
            f"VerificationDocument(user_id={self.user_id}, identity={self.identity_status}, "
            f"entrepreneur={self.entrepreneur_status})"
        )


class RegistrationCode(Base, table=True):
    """One-time code e-mailed to a prospective user.

    Table: registration_codes
    """

    __tablename__ = "registration_codes"
    __table_args__ = ({"extend_existing": True},)

    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, max_length=255)
    code: str = Field(max_length=16)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"RegistrationCode(email={self.email}, expires_at={self.expires_at})"
