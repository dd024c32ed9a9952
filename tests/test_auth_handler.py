"""
Unit tests for password hashing, session tokens and session cookies
"""

import time
from datetime import timedelta

import pytest
from fastapi import Response
from jose import jwt

from app import config
from app.auth.auth_handler import AuthHandler
from app.auth.session_cookies import (
    attach_session_cookie,
    clear_session_cookie,
    cookie_name_for_role,
)
from app.models.user import User, UserRole
from app.utils.error_handler import AuthenticationError


@pytest.fixture
def handler():
    return AuthHandler()


class TestPasswordVerifier:

    @pytest.mark.parametrize("password", ["p1", "Correct Horse Battery Staple", "pässwörd", "x" * 60])
    def test_hash_then_verify(self, handler, password):
        assert handler.verify_password(password, handler.get_password_hash(password))

    def test_wrong_password(self, handler):
        assert not handler.verify_password("p1", handler.get_password_hash("p2"))

    def test_hash_is_salted(self, handler):
        first = handler.get_password_hash("same")
        second = handler.get_password_hash("same")

        assert first != second
        assert first.startswith("$2b$")
        assert "same" not in first

    def test_malformed_stored_hash_is_a_mismatch(self, handler):
        assert handler.verify_password("p1", "not-a-bcrypt-hash") is False

    def test_dummy_verification_never_matches(self, handler):
        assert handler.verify_against_dummy("dummy-password-for-timing") is False


class TestTokenIssuer:

    def test_token_round_trip(self, handler):
        payload = handler.verify_token(handler.create_access_token(42))

        assert payload["sub"] == "42"
        assert payload["exp"] - payload["iat"] == config.TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    def test_expired_token(self, handler):
        token = handler.create_access_token(42, expires_delta=timedelta(seconds=1))
        time.sleep(2)

        with pytest.raises(AuthenticationError):
            handler.verify_token(token)

    def test_wrong_secret(self, handler):
        token = jwt.encode({"sub": "42"}, "someone-else", algorithm="HS256")

        with pytest.raises(AuthenticationError):
            handler.verify_token(token)

    def test_unsigned_token(self, handler):
        token = jwt.encode({"sub": "42"}, config.SECRET_KEY, algorithm="HS256")
        header, payload, _ = token.split(".")

        with pytest.raises(AuthenticationError):
            handler.verify_token(f"{header}.{payload}.")

    def test_token_without_subject(self, handler):
        token = jwt.encode({"exp": int(time.time()) + 60}, config.SECRET_KEY, algorithm="HS256")

        with pytest.raises(AuthenticationError):
            handler.verify_token(token)

    def test_garbage(self, handler):
        with pytest.raises(AuthenticationError):
            handler.verify_token("definitely.not.ajwt")


class TestSessionCookies:

    def test_cookie_names(self):
        assert cookie_name_for_role(UserRole.ADMIN) == "adminToken"
        assert cookie_name_for_role("Patient") == "patientToken"
        assert cookie_name_for_role(UserRole.DOCTOR) == "patientToken"

    def test_attach_and_clear_share_attributes(self):
        attached = Response()
        attach_session_cookie(attached, UserRole.ADMIN, "token-value")
        cleared = Response()
        clear_session_cookie(cleared, UserRole.ADMIN)

        set_header = attached.headers["set-cookie"]
        clear_header = cleared.headers["set-cookie"]

        assert set_header.startswith("adminToken=token-value;")
        assert clear_header.startswith('adminToken="";')
        for attribute in ("HttpOnly", "Secure", "SameSite=none", "Path=/"):
            assert attribute in set_header
            assert attribute in clear_header
        assert "Max-Age=0" in clear_header


class TestUserModel:

    def test_role_is_immutable(self):
        user = User(role=UserRole.PATIENT)
        user.role = "Patient"

        with pytest.raises(ValueError):
            user.role = UserRole.ADMIN

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            User(role="Nurse")
