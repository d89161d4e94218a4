"""In-memory admin session holding the auth tokens sent with each request."""

from typing import Dict, Optional

ADMIN_TOKEN_KEY = "adminToken"
ADMIN_USER_KEY = "adminUser"

# Every key cleared on a forced logout, customer keys included
SESSION_KEYS = (
    ADMIN_TOKEN_KEY,
    ADMIN_USER_KEY,
    "customerToken",
    "currentUser",
    "userToken",
)


class AdminSession:
    """Key/value token store scoped to one client instance."""

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    @property
    def token(self) -> Optional[str]:
        return self._values.get(ADMIN_TOKEN_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def login(self, token: str, user: Optional[str] = None) -> None:
        self._values[ADMIN_TOKEN_KEY] = token
        if user is not None:
            self._values[ADMIN_USER_KEY] = user

    def clear(self) -> None:
        for key in SESSION_KEYS:
            self._values.pop(key, None)
