"""Namespaced session state over an opaque key-value store."""

from __future__ import annotations

from typing import Any

from quotedesk_kernel.domain.values import Role, User
from quotedesk_kernel.stores.base import KeyValueStore

AUTH_TOKEN_KEY = "quotedesk_auth_token"
CURRENT_USER_KEY = "quotedesk_user"
USERS_DB_KEY = "quotedesk_users_db"


def user_to_json(user: User) -> dict[str, str]:
    return {"id": user.id, "name": user.name, "email": user.email, "role": user.role.value}


def user_from_json(data: dict[str, Any]) -> User:
    return User(
        id=data["id"],
        name=data["name"],
        email=data["email"],
        role=Role.parse(data["role"]),
    )


class SessionStore:
    """Current token and user, plus the registered-user directory.

    The directory maps email to the stored user record
    (including ``password_hash``).
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    @property
    def token(self) -> str | None:
        return self._store.get(AUTH_TOKEN_KEY)

    @property
    def current_user(self) -> User | None:
        data = self._store.get(CURRENT_USER_KEY)
        return user_from_json(data) if data else None

    def start(self, token: str, user: User) -> None:
        self._store.set(AUTH_TOKEN_KEY, token)
        self._store.set(CURRENT_USER_KEY, user_to_json(user))

    def end(self) -> None:
        self._store.delete(AUTH_TOKEN_KEY)
        self._store.delete(CURRENT_USER_KEY)

    def users(self) -> dict[str, dict[str, Any]]:
        return self._store.get(USERS_DB_KEY) or {}

    def save_users(self, users: dict[str, dict[str, Any]]) -> None:
        self._store.set(USERS_DB_KEY, users)
