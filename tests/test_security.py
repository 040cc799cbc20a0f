"""Tests for password hashing and signed access tokens."""

from __future__ import annotations

import pytest

from gconnect.services.security import (
    InvalidTokenError,
    TokenClaims,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

_NOW = 1_700_000_000


class TestPasswords:
    def test_round_trip(self):
        hashed = hash_password("s3cret!", iterations=1000)

        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_hash_format(self):
        hashed = hash_password("s3cret!", iterations=1000)

        scheme, iterations, salt, digest = hashed.split("$")
        assert scheme == "pbkdf2_sha256"
        assert iterations == "1000"
        assert len(salt) == 32
        assert len(digest) == 64

    def test_salted(self):
        assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)

    @pytest.mark.parametrize("bad", ["", "plain", "pbkdf2_sha256$x$00$00", "md5$1$00$00"])
    def test_malformed_hash_never_verifies(self, bad):
        assert verify_password("anything", bad) is False


class TestTokens:
    def test_round_trip(self):
        token = issue_token(5, "a@b.in", ttl_seconds=60, now=_NOW)

        claims = verify_token(token, now=_NOW + 30)

        assert claims == TokenClaims(user_id=5, email="a@b.in", issued_at=_NOW, expires_at=_NOW + 60)

    def test_expired(self):
        token = issue_token(5, "a@b.in", ttl_seconds=60, now=_NOW)

        with pytest.raises(InvalidTokenError, match="expired"):
            verify_token(token, now=_NOW + 60)

    def test_tampered_payload(self):
        token = issue_token(5, "a@b.in", ttl_seconds=60, now=_NOW)
        other = issue_token(6, "c@d.in", ttl_seconds=60, now=_NOW)
        forged = f"{other.split('.')[0]}.{token.split('.')[1]}"

        with pytest.raises(InvalidTokenError, match="signature"):
            verify_token(forged, now=_NOW)

    @pytest.mark.parametrize("bad", ["", "abc", "a.b.c", "!!!.???"])
    def test_malformed(self, bad):
        with pytest.raises(InvalidTokenError):
            verify_token(bad, now=_NOW)

    def test_signed_with_configured_secret(self, monkeypatch):
        from config.settings import settings

        token = issue_token(5, "a@b.in", ttl_seconds=60, now=_NOW)
        monkeypatch.setattr(settings, "token_secret", "rotated")

        with pytest.raises(InvalidTokenError):
            verify_token(token, now=_NOW)
