"""Role checks used by the authorization dependencies and routers."""

from __future__ import annotations

from typing import Optional, Union

from dressla.core.models.domain.enums import Role

RoleLike = Union[Role, str, None]


def _value(role: RoleLike) -> Optional[str]:
    if isinstance(role, Role):
        return role.value
    return role


def is_admin(role: RoleLike) -> bool:
    """Only ADMIN, not SUPPORT."""
    return _value(role) == Role.ADMIN.value


def is_support(role: RoleLike) -> bool:
    return _value(role) == Role.SUPPORT.value


def is_admin_or_support(role: RoleLike) -> bool:
    """Staff roles with access to the moderation panels."""
    return is_admin(role) or is_support(role)
