"""
Authentication endpoints.

Signup is e-mail based: the client first requests a one-time registration
code, then signs up with it. Login returns a bearer access token.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from dressla.core.database.entities.users import User
from dressla.core.logging_config import get_logger
from dressla.core.models.io.common import MessageResponse
from dressla.core.models.io.users import (
    LoginRequest,
    RegistrationCodeRequest,
    SignupRequest,
    TokenResponse,
    UserRead,
)
from dressla.marketplace.registration_codes import code_expiry, generate_registration_code, is_code_valid
from dressla.server.core.config import settings
from dressla.server.services.deps import ReposDep
from dressla.server.services.notifications import NotificationError, send_registration_code
from dressla.server.services.security import create_access_token, hash_password, verify_password

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/send-registration-code",
    response_model=MessageResponse,
    summary="Send Registration Code",
    description="E-mail a one-time code that must be presented at signup. Earlier codes for the address are revoked.",
    responses={
        200: {"description": "Code generated and sent"},
        400: {"description": "The e-mail address is already registered"},
        502: {"description": "The e-mail provider could not deliver the code"},
    },
)
async def send_code(payload: RegistrationCodeRequest, repos: ReposDep) -> MessageResponse:
    email = payload.email.lower()
    if await repos.users.email_taken(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    code = generate_registration_code()
    await repos.users.replace_registration_code(
        email, code, code_expiry(settings.marketplace.registration_code_ttl_minutes)
    )
    try:
        await send_registration_code(email, code)
    except NotificationError as e:
        logger.error(f"Failed to send registration code to {email}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send registration code") from e
    return MessageResponse(message="Registration code sent")


@router.post(
    "/signup",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Create an account. When a registration code is supplied it must be valid and is consumed.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "E-mail already registered or registration code invalid"},
    },
)
async def signup(payload: SignupRequest, repos: ReposDep) -> UserRead:
    email = payload.email.lower()
    if await repos.users.email_taken(email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User with this email already exists")

    if payload.code is not None:
        record = await repos.users.latest_registration_code(email)
        if not is_code_valid(record, payload.code):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired registration code"
            )
        await repos.users.delete_registration_codes(email)

    user = User(
        name=payload.name.strip(),
        email=email,
        phone=payload.phone,
        password_hash=hash_password(payload.password),
    )
    user = await repos.users.create(user)
    logger.info(f"Registered user {user.id}")
    return UserRead.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Log In",
    description="Exchange e-mail and password for a bearer access token.",
    responses={
        200: {"description": "Authenticated"},
        401: {"description": "Wrong e-mail or password"},
        403: {"description": "Account is banned"},
    },
)
async def login(payload: LoginRequest, repos: ReposDep) -> TokenResponse:
    user = await repos.users.get_by_email(payload.email)
    if user is None or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    if user.banned:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is banned")
    return TokenResponse(access_token=create_access_token(user.id, user.role), user=UserRead.model_validate(user))
