"""Account registration, login and session tokens."""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID, uuid4

import bcrypt

from nutri_coach.domain.models import AuthSession, UserAccount

_logger = logging.getLogger(__name__)

# bcrypt only hashes the first 72 bytes and newer releases reject longer input.
MAX_PASSWORD_BYTES = 72


class AuthError(Exception):
    """Base class for authentication failures."""


class UsernameTakenError(AuthError):
    """Raised when registering a username that already exists."""


class InvalidCredentialsError(AuthError):
    """Raised when a username/password pair does not match."""


class PasswordTooLongError(AuthError):
    """Raised when a password exceeds the bcrypt input limit."""


class UserRepository(Protocol):
    """Persistence interface for accounts."""

    def get_by_username(self, username: str) -> UserAccount | None:
        """Return the account for a username, if present."""

    def get_by_id(self, user_id: UUID) -> UserAccount | None:
        """Return the account for an id, if present."""

    def create_user(self, account: UserAccount) -> UserAccount:
        """Persist and return a new account."""


class SessionRepository(Protocol):
    """Persistence interface for login sessions."""

    def create_session(self, session: AuthSession) -> None:
        """Persist a session."""

    def get_session(self, token: str) -> AuthSession | None:
        """Return a session by token."""

    def delete_session(self, token: str) -> None:
        """Remove a session."""


@dataclass
class PasswordHasher:
    """bcrypt password hashing."""

    rounds: int = 12

    def hash(self, password: str) -> str:
        """Return a salted bcrypt hash."""
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Return True when the password matches the hash."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            return False


@dataclass
class AuthService:
    """Application service for account lifecycle actions."""

    users: UserRepository
    sessions: SessionRepository
    hasher: PasswordHasher
    session_ttl: timedelta = timedelta(days=30)

    def register(self, username: str, password: str) -> UserAccount:
        """Create an account for an unused username."""
        cleaned = username.strip()
        if self.users.get_by_username(cleaned) is not None:
            raise UsernameTakenError("Username already exists")
        account = UserAccount(
            id=uuid4(),
            username=cleaned,
            password_hash=self.hasher.hash(password),
            created_at=datetime.now(tz=UTC),
        )
        created = self.users.create_user(account)
        _logger.info("Registered account", extra={"user_id": created.id})
        return created

    def login(self, username: str, password: str) -> tuple[UserAccount, AuthSession]:
        """Verify credentials and issue a session token."""
        account = self.users.get_by_username(username.strip())
        if account is None or not self.hasher.verify(password, account.password_hash):
            raise InvalidCredentialsError("Invalid username or password")
        session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=account.id,
            expires_at=datetime.now(tz=UTC) + self.session_ttl,
        )
        self.sessions.create_session(session)
        return account, session

    def logout(self, token: str) -> None:
        """Invalidate a session token."""
        self.sessions.delete_session(token)

    def resolve(self, token: str) -> UserAccount | None:
        """Return the account for a live session token."""
        session = self.sessions.get_session(token)
        if session is None:
            return None
        if session.expires_at <= datetime.now(tz=UTC):
            self.sessions.delete_session(token)
            return None
        return self.users.get_by_id(session.user_id)
