"""
Admin and support panel I/O models.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from dressla.core.models.domain.enums import Role, VerificationStatus

from .users import UserRead, VerificationRead


class AdminStats(BaseModel):
    products: int
    users: int
    orders: int
    revenue: float


class AdminUserRead(UserRead):
    ban_reason: Optional[str] = None
    verification: Optional[VerificationRead] = None
    product_count: int = 0
    order_count: int = 0


class AdminUserList(BaseModel):
    users: List[AdminUserRead]


class BanUpdate(BaseModel):
    banned: bool
    reason: Optional[str] = None


class RoleUpdate(BaseModel):
    role: Role

    @model_validator(mode="after")
    def _assignable(self) -> "RoleUpdate":
        if self.role not in (Role.USER, Role.ADMIN):
            raise ValueError("Role must be USER or ADMIN")
        return self


class VerificationDecision(BaseModel):
    status: VerificationStatus
    comment: Optional[str] = Field(default=None, max_length=1000)
