from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.app_logger import get_logger, mask
from ..core.constants import LOGIN_MIN_RESPONSE_SECONDS, MAX_LIST_LIMIT
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, ValidationError
from ..security import audit
from .model import User
from .repository import UserRepository
from .schemas import SignupRequest, normalize_email

log = get_logger(__name__)

INVALID_CREDENTIALS = "Email or password is incorrect"
REGISTRATION_FAILED = "Unable to create account. Please try again later."


# Built at import so no login pays for it. Same algorithm as real hashes, so
# checking an unknown email costs the same as checking a known one.
DUMMY_PASSWORD_HASH = generate_password_hash("calendar-admin-timing-equalizer")


class InvalidCredentials(AuthenticationError):
    """Login failure; identical for an unknown email and a wrong password."""


class RegistrationFailed(ValidationError):
    """Signup failure that never says why (e.g. the email is taken)."""


class AuthService:
    """Use case: sign in and sign up.

    Login always performs exactly one hash comparison and never returns before
    ``min_response_seconds`` have elapsed, so a missing account and a wrong
    password cost the same time and produce the same error.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        min_response_seconds: float = LOGIN_MIN_RESPONSE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._users = users
        self._min_response_seconds = min_response_seconds
        self._clock = clock
        self._sleep = sleep

    def authenticate(self, email: str, password: str, *, client_ip: str = "unknown") -> User:
        started = self._clock()
        try:
            user, reason = self._check_credentials(normalize_email(email), password or "")
        finally:
            self._pad(started)

        if user is None:
            audit.failed_login(email or "", client_ip, reason)
            raise InvalidCredentials(INVALID_CREDENTIALS)

        log.info("User logged in", extra={"context": {"user_id": user.id, "email": mask(user.email)}})
        return user

    def _check_credentials(self, email: str, password: str) -> tuple[Optional[User], str]:
        user = self._users.get_by_email(email) if email else None
        password_hash = user.password_hash if user else DUMMY_PASSWORD_HASH
        try:
            ok = check_password_hash(password_hash, password)
        except (ValueError, TypeError):
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if user is None:
            return None, "User not found" if email else "Missing email"
        if not password:
            return None, "Missing password"
        if not ok:
            return None, "Invalid password"
        return user, ""

    def _pad(self, started: float) -> None:
        remaining = self._min_response_seconds - (self._clock() - started)
        if remaining > 0:
            self._sleep(remaining)

    def register(self, payload: dict) -> User:
        data = SignupRequest.model_validate(payload)

        # Hash before the duplicate check so both outcomes take the same time.
        password_hash = generate_password_hash(data.password)

        if self._users.get_by_email(data.email):
            log.info("Signup rejected", extra={"context": {"email": mask(data.email), "reason": "duplicate"}})
            raise RegistrationFailed(REGISTRATION_FAILED)

        try:
            user_id = self._users.create_user(
                name=data.name,
                email=data.email,
                password_hash=password_hash,
                role=Role.USER,
            )
        except ConflictError:
            raise RegistrationFailed(REGISTRATION_FAILED)

        user = self._users.get_by_id(user_id)
        if user is None:
            raise RegistrationFailed(REGISTRATION_FAILED)

        log.info("User registered", extra={"context": {"user_id": user.id, "email": mask(user.email)}})
        return user


class UserService:
    """Use case: user lookups for selectors."""

    def __init__(self, users: UserRepository):
        self._users = users

    def get(self, user_id: int) -> Optional[User]:
        return self._users.get_by_id(int(user_id))

    def list_users(self, *, limit: int = MAX_LIST_LIMIT) -> Sequence[User]:
        return self._users.list_all(limit=limit)
