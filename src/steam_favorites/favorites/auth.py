"""Who the current user is.

Authentication itself happens elsewhere; the favorites code only needs to
know whether someone is signed in and under which id.
"""

import os
from typing import Protocol


class AuthProvider(Protocol):
    def is_authenticated(self) -> bool: ...

    def current_user_id(self) -> str | None: ...


class StaticAuthProvider:
    """Auth state held in memory, switched with sign_in / sign_out."""

    def __init__(self, user_id: str | None = None):
        self._user_id = user_id or None

    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def current_user_id(self) -> str | None:
        return self._user_id

    def sign_in(self, user_id: str) -> None:
        if not user_id:
            raise ValueError("user_id must be non-empty")
        self._user_id = user_id

    def sign_out(self) -> None:
        self._user_id = None


class EnvAuthProvider:
    """Treats the STEAM_USER_ID environment variable as the signed-in user."""

    ENV_VAR = "STEAM_USER_ID"

    def current_user_id(self) -> str | None:
        value = os.getenv(self.ENV_VAR, "").strip()
        return value or None

    def is_authenticated(self) -> bool:
        return self.current_user_id() is not None
