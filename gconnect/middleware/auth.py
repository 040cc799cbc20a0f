"""Bearer-token authentication dependencies.

``require_user`` resolves the ``Authorization: Bearer <token>`` header to
the stored :class:`~gconnect.models.user_profile.User`:

    * no header            -> 401
    * bad / expired token  -> 403
    * user no longer exists -> 403

``optional_user`` performs the same lookup but returns ``None`` instead of
raising, for endpoints that only personalise their output.
"""

from __future__ import annotations

import structlog
from fastapi import Depends, HTTPException, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gconnect.models.user_profile import User
from gconnect.services.security import InvalidTokenError, verify_token
from gconnect.services.storage import InMemoryStorage

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> InMemoryStorage:
    """The store created in the application lifespan."""
    return request.app.state.storage


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def require_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: InMemoryStorage = Depends(get_storage),
) -> User:
    """FastAPI dependency that enforces a valid access token.

    Usage::

        @router.get("/me")
        async def me(user: User = Depends(require_user)): ...
    """
    if credentials is None or not credentials.credentials:
        logger.warning("auth.missing_token", path=request.url.path, client_ip=_client_ip(request))
        raise HTTPException(
            status_code=401,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = verify_token(credentials.credentials)
    except InvalidTokenError as exc:
        logger.warning(
            "auth.invalid_token",
            path=request.url.path,
            client_ip=_client_ip(request),
            reason=str(exc),
        )
        raise HTTPException(status_code=403, detail="Invalid or expired token") from exc

    user = store.get_user(claims.user_id)
    if user is None:
        logger.warning("auth.unknown_user", user_id=claims.user_id)
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    structlog.contextvars.bind_contextvars(user_id=user.user_id)
    return user


async def optional_user(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    store: InMemoryStorage = Depends(get_storage),
) -> User | None:
    """Like :func:`require_user` but never fails."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        claims = verify_token(credentials.credentials)
    except InvalidTokenError:
        return None
    return store.get_user(claims.user_id)
