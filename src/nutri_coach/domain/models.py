"""Domain models for accounts and persisted user data."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from nutri_coach.domain.meals import DailyLog
from nutri_coach.domain.profile import UserProfile


@dataclass(frozen=True)
class UserAccount:
    """Represents a registered account."""

    id: UUID
    username: str
    password_hash: str
    created_at: datetime


@dataclass(frozen=True)
class AuthSession:
    """Bearer token issued at login."""

    token: str
    user_id: UUID
    expires_at: datetime


@dataclass(frozen=True)
class UserData:
    """Per-user snapshot of profile and day-indexed logs."""

    profile: UserProfile | None = None
    logs: list[DailyLog] = field(default_factory=list)
