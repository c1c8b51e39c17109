"""
Tests for mock authentication (``quotedesk_services.auth``).

Covers sign-up/sign-in/forgot-password, the JWT session token and its
expiry against the injected clock, role switching and sign-out.
"""

from datetime import timedelta

import jwt
import pytest

from quotedesk_kernel.domain.values import Role
from quotedesk_kernel.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from quotedesk_services.auth import AuthService
from quotedesk_services.session import (
    AUTH_TOKEN_KEY,
    CURRENT_USER_KEY,
    USERS_DB_KEY,
    SessionStore,
)

SECRET = "test-secret"


@pytest.fixture
def session(kv_store):
    return SessionStore(kv_store)


@pytest.fixture
def auth(session, deterministic_clock):
    return AuthService(session, SECRET, clock=deterministic_clock, token_ttl_hours=24)


# =========================================================================
# Sign-up / sign-in
# =========================================================================


class TestAccounts:

    def test_sign_up_defaults_to_viewer(self, auth, session):
        result = auth.sign_up("Vic", "vic@example.com", "pw")

        assert result.user.role == Role.VIEWER
        assert session.token == result.token
        assert session.current_user == result.user

    def test_password_is_hashed(self, auth, kv_store):
        auth.sign_up("Vic", "vic@example.com", "s3cret")
        record = kv_store.get(USERS_DB_KEY)["vic@example.com"]
        assert "s3cret" not in record.values()
        assert record["password_hash"].startswith("$pbkdf2-sha256$")

    def test_duplicate_email(self, auth):
        auth.sign_up("Vic", "vic@example.com", "pw")
        with pytest.raises(UserAlreadyExistsError):
            auth.sign_up("Other", "vic@example.com", "pw2", role=Role.MANAGER)

    def test_sign_in(self, auth):
        signed_up = auth.sign_up("Mia", "mia@example.com", "pw", role="manager")
        auth.sign_out()

        result = auth.sign_in("mia@example.com", "pw")

        assert result.user == signed_up.user
        assert result.user.role == Role.MANAGER

    @pytest.mark.parametrize("email, password", [
        ("mia@example.com", "wrong"),
        ("nobody@example.com", "pw"),
    ])
    def test_bad_credentials(self, auth, email, password):
        auth.sign_up("Mia", "mia@example.com", "pw")
        with pytest.raises(InvalidCredentialsError):
            auth.sign_in(email, password)

    def test_forgot_password(self, auth):
        auth.sign_up("Mia", "mia@example.com", "pw")
        assert auth.forgot_password("mia@example.com") is None
        with pytest.raises(UserNotFoundError):
            auth.forgot_password("nobody@example.com")


# =========================================================================
# Tokens
# =========================================================================


class TestTokens:

    def test_claims(self, auth, deterministic_clock):
        result = auth.sign_up("Sam", "sam@example.com", "pw", role=Role.SALES_REP)
        claims = jwt.decode(
            result.token, SECRET, algorithms=["HS256"], options={"verify_exp": False}
        )
        now = int(deterministic_clock.now().timestamp())

        assert claims["sub"] == result.user.id
        assert claims["role"] == "sales_rep"
        assert claims["iat"] == now
        assert claims["exp"] == now + int(timedelta(hours=24).total_seconds())

    def test_current_user_with_valid_token(self, auth):
        result = auth.sign_up("Sam", "sam@example.com", "pw")
        assert auth.current_user() == result.user

    def test_token_expires_by_clock(self, auth, deterministic_clock):
        auth.sign_up("Sam", "sam@example.com", "pw")
        deterministic_clock.advance(timedelta(hours=24).total_seconds())
        with pytest.raises(InvalidTokenError, match="expired"):
            auth.current_user()

    def test_forged_token(self, auth, session, deterministic_clock):
        result = auth.sign_up("Sam", "sam@example.com", "pw")
        forged = AuthService(session, "other-secret", clock=deterministic_clock)
        with pytest.raises(InvalidTokenError):
            forged.decode_token(result.token)

    def test_no_session(self, auth):
        with pytest.raises(InvalidTokenError):
            auth.current_user()


# =========================================================================
# Role switch / sign-out
# =========================================================================


class TestSessionChanges:

    def test_switch_role_updates_session_and_directory(self, auth, session):
        original = auth.sign_up("Sam", "sam@example.com", "pw")

        result = auth.switch_role("manager")

        assert result.user.role == Role.MANAGER
        assert result.token != original.token
        assert session.current_user.role == Role.MANAGER
        assert session.users()["sam@example.com"]["role"] == "manager"
        assert auth.decode_token(session.token)["role"] == "manager"

    def test_sign_in_after_switch_keeps_new_role(self, auth):
        auth.sign_up("Sam", "sam@example.com", "pw")
        auth.switch_role(Role.SALES_REP)
        auth.sign_out()
        assert auth.sign_in("sam@example.com", "pw").user.role == Role.SALES_REP

    def test_sign_out_clears_session_keeps_directory(self, auth, kv_store):
        auth.sign_up("Sam", "sam@example.com", "pw")
        auth.sign_out()

        assert kv_store.get(AUTH_TOKEN_KEY) is None
        assert kv_store.get(CURRENT_USER_KEY) is None
        assert "sam@example.com" in kv_store.get(USERS_DB_KEY)
