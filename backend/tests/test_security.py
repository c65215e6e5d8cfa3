"""
Unit tests per hashing password, token di sessione ed estrazione del token.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest
from jose import jwt
from starlette.requests import Request

from app.core.config import settings
from app.core.deps import extract_token
from app.core.exceptions import AuthenticationError
from app.core.security import create_access_token, decode_token, hash_password, verify_password
from conftest import make_claims


def _request(cookie: Optional[str] = None) -> Request:
    headers = []
    if cookie is not None:
        headers.append((b"cookie", f"{settings.auth_cookie_name}={cookie}".encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


class TestPasswordHashing:

    def test_verify(self):
        hashed = hash_password("segreta1")

        assert hashed != "segreta1"
        assert verify_password("segreta1", hashed)
        assert not verify_password("sbagliata", hashed)

    def test_salted(self):
        assert hash_password("segreta1") != hash_password("segreta1")

    def test_malformed_hash_is_wrong_password(self):
        assert verify_password("segreta1", "non-un-hash") is False


class TestAccessToken:

    def test_round_trip(self, sales_claims):
        token = create_access_token(sales_claims)
        payload = decode_token(token)

        assert payload.sub == sales_claims.sub
        assert payload.username == sales_claims.username
        assert payload.permissions == sales_claims.permissions
        assert payload.is_admin is False
        assert payload.type == "access"

    def test_default_lifetime_is_seven_days(self, admin_claims):
        before = datetime.now(timezone.utc)
        payload = decode_token(create_access_token(admin_claims))
        lifetime = payload.exp - before

        assert timedelta(days=7) - timedelta(minutes=1) < lifetime <= timedelta(days=7, seconds=1)
        assert settings.access_token_max_age == 7 * 24 * 60 * 60

    def test_expired_token(self, sales_claims):
        token = create_access_token(sales_claims, expires_delta=timedelta(seconds=-10))
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_tampered_signature(self, sales_claims):
        token = create_access_token(sales_claims)
        header, payload, signature = token.split(".")
        forged = ".".join([header, payload, signature[::-1]])
        with pytest.raises(AuthenticationError):
            decode_token(forged)

    def test_other_secret(self, sales_claims):
        token = jwt.encode(
            {"sub": sales_claims.sub, "username": "x", "type": "access", "exp": 9999999999},
            "un-altro-segreto",
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_missing_token(self):
        with pytest.raises(AuthenticationError) as exc_info:
            decode_token(None)
        assert exc_info.value.status_code == 401

    def test_wrong_type(self):
        token = jwt.encode(
            {"sub": "abc", "username": "x", "type": "refresh", "exp": 9999999999},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            decode_token(token)


class TestExtractToken:

    def test_cookie(self):
        assert extract_token(_request(cookie="dal-cookie")) == "dal-cookie"

    def test_bearer_header(self):
        assert extract_token(_request(), "dall-header") == "dall-header"

    def test_cookie_wins_over_header(self):
        assert extract_token(_request(cookie="dal-cookie"), "dall-header") == "dal-cookie"

    def test_nothing(self):
        assert extract_token(_request()) is None
        assert extract_token(_request(), "") is None
