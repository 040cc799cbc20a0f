"""Registration, login and current-user endpoints for GConnect v1."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from gconnect.middleware.auth import get_storage, require_user
from gconnect.models.user_profile import User, UserCreate
from gconnect.services.security import hash_password, issue_token, verify_password
from gconnect.services.storage import DuplicateEmailError, InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str


class AuthResponse(BaseModel):
    """A user (without password hash) and a fresh access token."""

    user: dict[str, Any]
    token: str


class UserResponse(BaseModel):
    user: dict[str, Any]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    body: UserCreate,
    store: InMemoryStorage = Depends(get_storage),
) -> AuthResponse:
    """Create an account and sign the new user in."""
    profile = body.model_dump(exclude={"email", "password", "first_name", "last_name"})
    try:
        user = store.create_user(
            email=body.email,
            password_hash=hash_password(body.password),
            first_name=body.first_name,
            last_name=body.last_name,
            **profile,
        )
    except DuplicateEmailError:
        logger.info("api.auth.duplicate_email")
        raise HTTPException(status_code=409, detail="User already exists with this email")

    logger.info("api.auth.registered", user_id=user.user_id)
    return AuthResponse(user=user.public_dict(), token=issue_token(user.user_id, user.email))


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    store: InMemoryStorage = Depends(get_storage),
) -> AuthResponse:
    user = store.get_user_by_email(body.email)
    if user is None or not verify_password(body.password, user.password_hash):
        logger.warning("api.auth.login_failed")
        raise HTTPException(status_code=401, detail="Invalid credentials")

    logger.info("api.auth.login", user_id=user.user_id)
    return AuthResponse(user=user.public_dict(), token=issue_token(user.user_id, user.email))


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(require_user)) -> UserResponse:
    return UserResponse(user=user.public_dict())
