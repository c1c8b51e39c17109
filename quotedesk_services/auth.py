"""
quotedesk_services.auth -- Mock authentication backed by the session store.

Responsibility:
    Sign-up, sign-in, forgot-password, role switch and sign-out for desk
    users.  Users live in the key-value store's user directory with a
    passlib password hash; sessions are HS256 JWTs issued with PyJWT.

Architecture position:
    Services layer.  Depends on SessionStore and an injected Clock.  Token
    expiry is checked against the Clock, not the wall clock, so expiry is
    testable with a DeterministicClock.

Failure modes:
    - UserAlreadyExistsError on duplicate sign-up email.
    - InvalidCredentialsError on unknown email or wrong password.
    - UserNotFoundError from forgot_password for an unknown email.
    - InvalidTokenError for forged, malformed, expired or absent sessions.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import timedelta

import jwt
from passlib.context import CryptContext

from quotedesk_kernel.domain.clock import Clock, SystemClock
from quotedesk_kernel.domain.values import Role, User
from quotedesk_kernel.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from quotedesk_kernel.logging_config import get_logger
from quotedesk_services.session import SessionStore, user_from_json, user_to_json

logger = get_logger("services.auth")

TOKEN_ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL_HOURS = 24

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class AuthResult:
    user: User
    token: str


class AuthService:
    """Mock auth over the session store."""

    def __init__(
        self,
        session: SessionStore,
        secret: str,
        clock: Clock | None = None,
        token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    ):
        self._session = session
        self._secret = secret
        self._clock = clock or SystemClock()
        self._ttl = timedelta(hours=token_ttl_hours)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def issue_token(self, user: User) -> str:
        now = self._clock.now()
        payload = {
            "sub": user.id,
            "role": user.role.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def decode_token(self, token: str) -> dict:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"verify_exp": False, "require": ["sub", "role", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise InvalidTokenError(str(exc)) from exc
        if claims["exp"] <= int(self._clock.now().timestamp()):
            raise InvalidTokenError("token expired")
        return claims

    # ------------------------------------------------------------------
    # Account operations
    # ------------------------------------------------------------------

    def sign_up(
        self, name: str, email: str, password: str, role: Role | str = Role.VIEWER
    ) -> AuthResult:
        users = self._session.users()
        if email in users:
            raise UserAlreadyExistsError(email)

        user = User(id=uuid.uuid4().hex, name=name, email=email, role=Role.parse(role))
        users[email] = {**user_to_json(user), "password_hash": password_context.hash(password)}
        self._session.save_users(users)

        result = AuthResult(user=user, token=self.issue_token(user))
        self._session.start(result.token, user)
        logger.info("user_signed_up", extra={"user_id": user.id, "role": user.role.value})
        return result

    def sign_in(self, email: str, password: str) -> AuthResult:
        record = self._session.users().get(email)
        if record is None or not password_context.verify(password, record["password_hash"]):
            logger.info("sign_in_refused", extra={"email": email})
            raise InvalidCredentialsError()

        user = user_from_json(record)
        result = AuthResult(user=user, token=self.issue_token(user))
        self._session.start(result.token, user)
        logger.info("user_signed_in", extra={"user_id": user.id})
        return result

    def forgot_password(self, email: str) -> None:
        """Succeeds silently for known emails; no message is sent."""
        if email not in self._session.users():
            raise UserNotFoundError(email)

    def current_user(self) -> User:
        """The signed-in user, after validating the stored token."""
        token = self._session.token
        user = self._session.current_user
        if token is None or user is None:
            raise InvalidTokenError("no active session")
        claims = self.decode_token(token)
        if claims["sub"] != user.id:
            raise InvalidTokenError("token does not match session user")
        return user

    def switch_role(self, role: Role | str) -> AuthResult:
        """Change the signed-in user's role; the new role is the only authorization signal."""
        user = self.current_user().with_role(Role.parse(role))

        users = self._session.users()
        if user.email in users:
            users[user.email] = {**users[user.email], "role": user.role.value}
            self._session.save_users(users)

        result = AuthResult(user=user, token=self.issue_token(user))
        self._session.start(result.token, user)
        logger.info("role_switched", extra={"user_id": user.id, "role": user.role.value})
        return result

    def sign_out(self) -> None:
        self._session.end()
        logger.info("user_signed_out")
