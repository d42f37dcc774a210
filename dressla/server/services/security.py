"""
Authentication and authorization.

Password hashing uses passlib's bcrypt scheme and access tokens are HS256 JWTs
signed with python-jose. The FastAPI dependencies below resolve the bearer
token to a :class:`User` and enforce role checks.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from dressla.core.database.entities.users import User
from dressla.core.database.repositories import SqlRepoBundle, get_repos
from dressla.core.logging_config import get_logger
from dressla.core.models.domain.enums import Role
from dressla.marketplace.roles import is_admin, is_admin_or_support
from dressla.server.core.config import settings

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def _password_context() -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.auth.bcrypt_rounds)


def hash_password(password: str) -> str:
    return _password_context().hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return _password_context().verify(password, password_hash)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(subject: str, role: Role | str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a JWT carrying the user id in ``sub`` and the role in ``role``."""
    auth = settings.auth
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=auth.access_token_expire_minutes))
    role_value = role.value if isinstance(role, Role) else role
    claims = {"sub": subject, "role": role_value, "exp": expire}
    return jwt.encode(claims, auth.jwt_secret, algorithm=auth.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        HTTPException: 401 when the token is invalid, expired or has no subject.
    """
    auth = settings.auth
    try:
        claims = jwt.decode(token, auth.jwt_secret, algorithms=[auth.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    if not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


async def _resolve_user(token: str, repos: SqlRepoBundle) -> User:
    claims = decode_access_token(token)
    user = await repos.users.get_by_id(claims["sub"])
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    if user.banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")
    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repos: SqlRepoBundle = Depends(get_repos),
) -> User:
    """Resolve the bearer token to a user. Missing credentials give 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await _resolve_user(credentials.credentials, repos)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    repos: SqlRepoBundle = Depends(get_repos),
) -> Optional[User]:
    """Like :func:`get_current_user` but anonymous requests resolve to ``None``."""
    if credentials is None or not credentials.credentials:
        return None
    return await _resolve_user(credentials.credentials, repos)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return user


async def require_admin_or_support(user: User = Depends(get_current_user)) -> User:
    if not is_admin_or_support(user.role):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin or support access required")
    return user
