"""
SessionGateway - Email/password authentication and auth state events.

Credentials live in the progress database as bcrypt hashes.
Signing up also creates the user's profile (XP 0, level 1, streak 0).
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import bcrypt

from lexlingo.exceptions import AuthError, Unauthenticated, ValidationError

from .events import Subscription
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only reads the first 72 bytes
MAX_PASSWORD_BYTES = 72


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str


AuthListener = Callable[[AuthEvent, Optional[Session]], None]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def check_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def validate_credentials(email: str, password: str) -> str:
    """Normalize email and check both fields; returns the normalized email."""
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return email


class SessionGateway:
    """Holds the active session for one client and notifies listeners on change."""

    def __init__(self, tracker: ProgressTracker):
        self.tracker = tracker
        self._session: Optional[Session] = None
        self._listeners: list[AuthListener] = []

    def get_session(self) -> Optional[Session]:
        return self._session

    def require_session(self) -> Session:
        if self._session is None:
            raise Unauthenticated("Sign in to continue")
        return self._session

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        self._listeners.append(callback)

        def release():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(release)

    def _emit(self, event: AuthEvent):
        for listener in list(self._listeners):
            try:
                listener(event, self._session)
            except Exception:
                logger.exception(f"Auth listener failed on {event.value}")

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Session:
        email = validate_credentials(email, password)
        if self.tracker.get_account(email) is not None:
            raise AuthError("This email is already registered")

        with self.tracker.transaction():
            user_id = self.tracker.create_account(email, hash_password(password))
            self.tracker.create_profile(user_id, email=email, name=name)
        logger.info(f"Created account {user_id}")
        return self._start(Session(user_id=user_id, email=email))

    def sign_in(self, email: str, password: str) -> Session:
        email = validate_credentials(email, password)
        account = self.tracker.get_account(email)
        if account is None or not check_password(password, account["password_hash"]):
            raise AuthError("Invalid login credentials")
        return self._start(Session(user_id=account["user_id"], email=email))

    def sign_out(self):
        if self._session is None:
            return
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT)

    def _start(self, session: Session) -> Session:
        self._session = session
        self._emit(AuthEvent.SIGNED_IN)
        return session
