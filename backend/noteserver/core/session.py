from __future__ import annotations

from typing import Any, MutableMapping, Optional


USER_KEY = "user"


class SessionContext:
    """Narrow view over the cookie session: read, set or clear the user."""

    def __init__(self, session: MutableMapping[str, Any]):
        self._session = session

    def current_user(self) -> Optional[dict[str, Any]]:
        return self._session.get(USER_KEY)

    @property
    def is_authenticated(self) -> bool:
        return self.current_user() is not None

    def set_user(self, user: dict[str, Any]) -> None:
        self._session[USER_KEY] = dict(user)

    def clear(self) -> None:
        self._session.clear()
