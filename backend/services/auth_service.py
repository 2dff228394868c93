"""Email/password authentication through Supabase, with an in-memory stand-in."""

from __future__ import annotations

import hashlib
import re
import secrets
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from ..utils.logging import get_logger

LOGGER = get_logger("services.auth")

MIN_PASSWORD_LENGTH = 6

AUTH_MESSAGES = {
    "email_address_invalid": "Invalid email address format.",
    "invalid_email": "Invalid email address format.",
    "user_banned": "Your account has been disabled.",
    "user_disabled": "Your account has been disabled.",
    "invalid_credentials": "Invalid email or password.",
    "user_not_found": "Invalid email or password.",
    "wrong_password": "Invalid email or password.",
    "email_exists": "This email is already registered.",
    "user_already_exists": "This email is already registered.",
    "weak_password": f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
    "over_request_rate_limit": "Too many failed login attempts. Please try again later.",
    "too_many_requests": "Too many failed login attempts. Please try again later.",
    "missing_credentials": "Email and password are required.",
}

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str


class AuthError(Exception):
    def __init__(self, code: str, detail: str = "") -> None:
        super().__init__(detail or code)
        self.code = code
        self.detail = detail


def auth_error_message(error: AuthError) -> str:
    message = AUTH_MESSAGES.get(error.code)
    if message:
        return message
    return f"Authentication failed: {error.detail or error.code}"


AuthListener = Callable[[Optional[AuthUser]], None]


class AuthProvider(Protocol):
    def sign_in(self, email: str, password: str) -> AuthUser:
        ...

    def register(self, email: str, password: str) -> AuthUser:
        ...

    def sign_out(self) -> None:
        ...

    def current_user(self) -> Optional[AuthUser]:
        ...

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        ...


class _ListenerMixin:
    _listeners: List[AuthListener]

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        self._listeners.append(listener)
        listener(self.current_user())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, user: Optional[AuthUser]) -> None:
        for listener in list(self._listeners):
            listener(user)


class InMemoryAuthProvider(_ListenerMixin):
    """Local accounts for demo mode and tests; passwords are salted sha256 digests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: Dict[str, Tuple[str, str, str]] = {}
        self._current: Optional[AuthUser] = None
        self._listeners = []
        self.disabled: set = set()

    @staticmethod
    def _digest(salt: str, password: str) -> str:
        return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()

    def register(self, email: str, password: str) -> AuthUser:
        email = email.strip().lower()
        if not _EMAIL_RE.match(email):
            raise AuthError("invalid_email")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError("weak_password")
        with self._lock:
            if email in self._accounts:
                raise AuthError("email_exists")
            salt = secrets.token_hex(8)
            uid = secrets.token_hex(12)
            self._accounts[email] = (uid, salt, self._digest(salt, password))
            self._current = AuthUser(uid=uid, email=email)
        LOGGER.info("user_registered uid=%s", uid)
        self._notify(self._current)
        return self._current

    def sign_in(self, email: str, password: str) -> AuthUser:
        email = email.strip().lower()
        if not _EMAIL_RE.match(email):
            raise AuthError("invalid_email")
        with self._lock:
            account = self._accounts.get(email)
            if account is None or self._digest(account[1], password) != account[2]:
                raise AuthError("invalid_credentials")
            if email in self.disabled:
                raise AuthError("user_disabled")
            self._current = AuthUser(uid=account[0], email=email)
        self._notify(self._current)
        return self._current

    def sign_out(self) -> None:
        with self._lock:
            self._current = None
        self._notify(None)

    def current_user(self) -> Optional[AuthUser]:
        return self._current


class SupabaseAuthProvider(_ListenerMixin):  # pragma: no cover - requires a live project
    def __init__(self, client) -> None:
        self.client = client
        self._current: Optional[AuthUser] = None
        self._listeners = []

    @staticmethod
    def _to_user(response) -> AuthUser:
        user = getattr(response, "user", None)
        if user is None:
            raise AuthError("invalid_credentials")
        return AuthUser(uid=str(user.id), email=str(user.email or ""))

    @staticmethod
    def _wrap(exc: Exception) -> AuthError:
        code = getattr(exc, "code", None) or "unknown"
        return AuthError(str(code), str(exc))

    def sign_in(self, email: str, password: str) -> AuthUser:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise self._wrap(exc) from exc
        self._current = self._to_user(response)
        self._notify(self._current)
        return self._current

    def register(self, email: str, password: str) -> AuthUser:
        try:
            response = self.client.auth.sign_up({"email": email, "password": password})
        except Exception as exc:
            raise self._wrap(exc) from exc
        self._current = self._to_user(response)
        self._notify(self._current)
        return self._current

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as exc:
            raise self._wrap(exc) from exc
        self._current = None
        self._notify(None)

    def current_user(self) -> Optional[AuthUser]:
        return self._current
