"""Password hashing and bearer-token issuance.

Passwords are stored as salted PBKDF2-HMAC-SHA256 digests in the form
``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.

Tokens are compact ``<payload>.<signature>`` strings: an orjson payload
(``sub``, ``email``, ``iat``, ``exp``) and its HMAC-SHA256 signature,
both base64url-encoded without padding.  All comparisons are
constant-time.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Final

import orjson
import structlog

from config.settings import settings

logger: structlog.stdlib.BoundLogger = structlog.get_logger(__name__)

_HASH_SCHEME: Final[str] = "pbkdf2_sha256"
_SALT_BYTES: Final[int] = 16


class InvalidTokenError(Exception):
    """Raised for malformed, forged or expired tokens."""


@dataclass(frozen=True, slots=True)
class TokenClaims:
    user_id: int
    email: str
    issued_at: int
    expires_at: int


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def hash_password(password: str, *, iterations: int | None = None) -> str:
    iterations = iterations or settings.password_hash_iterations
    salt = secrets.token_bytes(_SALT_BYTES)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return f"{_HASH_SCHEME}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, hashed: str) -> bool:
    """Check *password* against a digest produced by :func:`hash_password`."""
    try:
        scheme, iterations_str, salt_hex, digest_hex = hashed.split("$")
        iterations = int(iterations_str)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        logger.warning("security.malformed_password_hash")
        return False

    if scheme != _HASH_SCHEME:
        return False

    candidate = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, iterations)
    return hmac.compare_digest(candidate, expected)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def issue_token(
    user_id: int,
    email: str,
    *,
    ttl_seconds: int | None = None,
    now: float | None = None,
) -> str:
    issued_at = int(now if now is not None else time.time())
    ttl = ttl_seconds if ttl_seconds is not None else settings.token_ttl_hours * 3600
    payload = orjson.dumps({
        "sub": user_id,
        "email": email,
        "iat": issued_at,
        "exp": issued_at + ttl,
    })
    body = _b64encode(payload)
    return f"{body}.{_b64encode(_sign(body))}"


def verify_token(token: str, *, now: float | None = None) -> TokenClaims:
    """Validate *token* and return its claims.

    Raises
    ------
    InvalidTokenError
        If the token is malformed, its signature does not match, or it
        has expired.
    """
    try:
        body, signature = token.split(".")
        provided = _b64decode(signature)
    except ValueError as exc:
        raise InvalidTokenError("malformed token") from exc

    if not hmac.compare_digest(provided, _sign(body)):
        raise InvalidTokenError("bad signature")

    try:
        claims = orjson.loads(_b64decode(body))
        token_claims = TokenClaims(
            user_id=int(claims["sub"]),
            email=str(claims["email"]),
            issued_at=int(claims["iat"]),
            expires_at=int(claims["exp"]),
        )
    except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError("malformed claims") from exc

    current = now if now is not None else time.time()
    if current >= token_claims.expires_at:
        raise InvalidTokenError("token expired")

    return token_claims


def _sign(body: str) -> bytes:
    return hmac.new(settings.token_secret.encode(), body.encode(), hashlib.sha256).digest()


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode())
