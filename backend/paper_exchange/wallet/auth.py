"""Bearer-token authentication capability."""

from __future__ import annotations

import secrets
from threading import Lock
from typing import Protocol

from ..exceptions import Unauthenticated


class Authenticator(Protocol):
    """Resolves a caller's credential to a stable account id."""

    def authenticate(self, token: str | None) -> str:
        """Return the account id, or raise Unauthenticated."""
        ...


class TokenRegistry:
    """In-memory Authenticator issuing opaque random tokens."""

    def __init__(self) -> None:
        self._tokens: dict[str, str] = {}
        self._lock = Lock()

    def issue(self, account_id: str) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._tokens[token] = account_id
        return token

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def authenticate(self, token: str | None) -> str:
        if not token:
            raise Unauthenticated("No token, authorization denied")
        with self._lock:
            account_id = self._tokens.get(token)
        if account_id is None:
            raise Unauthenticated("Invalid token")
        return account_id
