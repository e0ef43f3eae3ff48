"""Per-user snapshot store with debounced persistence."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol
from uuid import UUID

from nutri_coach.domain.models import UserData

_logger = logging.getLogger(__name__)


class UserDataRepository(Protocol):
    """Persistence interface for per-user profile and log snapshots."""

    def load(self, user_id: UUID) -> UserData:
        """Return the stored snapshot, or an empty one."""

    def save(self, user_id: UUID, data: UserData) -> None:
        """Replace the stored snapshot."""


@dataclass
class _CachedSnapshot:
    data: UserData
    expires_at: datetime


@dataclass
class UserDataStore:
    """Working copies of user snapshots, written after a quiet period.

    ``update`` replaces the working copy and (re)starts a timer; the write
    happens once no further update arrives for ``debounce_seconds``.
    ``flush`` writes immediately and is used on logout and shutdown.

    Copies with no pending write are reused for ``cache_ttl_seconds`` and then
    reloaded, so writes made by other processes are picked up.
    """

    repository: UserDataRepository
    debounce_seconds: float = 0.5
    cache_ttl_seconds: float = 0.0
    _cache: dict[UUID, _CachedSnapshot] = field(default_factory=dict, init=False)
    _dirty: set[UUID] = field(default_factory=set, init=False)
    _timers: dict[UUID, asyncio.Task[None]] = field(default_factory=dict, init=False)

    def get(self, user_id: UUID) -> UserData:
        """Return the pending copy, or a fresh one from the repository."""
        self._prune()
        entry = self._cache.get(user_id)
        if entry is not None:
            return entry.data
        data = self.repository.load(user_id)
        self._remember(user_id, data)
        return data

    def initialize(self, user_id: UUID) -> UserData:
        """Write an empty snapshot for a newly registered user."""
        data = UserData()
        self.repository.save(user_id, data)
        self._remember(user_id, data)
        return data

    def update(self, user_id: UUID, data: UserData) -> None:
        """Replace the working copy and schedule a debounced write."""
        self._remember(user_id, data)
        self._dirty.add(user_id)
        self._cancel_timer(user_id)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush(user_id)
            return
        self._timers[user_id] = loop.create_task(self._save_later(user_id))

    def flush(self, user_id: UUID) -> None:
        """Write any pending snapshot for the user now."""
        self._cancel_timer(user_id)
        self._write(user_id)

    def flush_all(self) -> None:
        """Write every pending snapshot."""
        for user_id in list(self._dirty):
            self.flush(user_id)

    def evict(self, user_id: UUID) -> None:
        """Flush and drop the working copy."""
        self.flush(user_id)
        self._cache.pop(user_id, None)

    def has_pending(self, user_id: UUID) -> bool:
        """Return True when a write is still pending for the user."""
        return user_id in self._dirty

    def cached_users(self) -> set[UUID]:
        return set(self._cache)

    async def _save_later(self, user_id: UUID) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._timers.pop(user_id, None)
        try:
            self._write(user_id)
        except Exception:
            _logger.exception("Debounced save failed", extra={"user_id": user_id})

    def _write(self, user_id: UUID) -> None:
        if user_id not in self._dirty:
            return
        entry = self._cache[user_id]
        self.repository.save(user_id, entry.data)
        self._dirty.discard(user_id)
        self._remember(user_id, entry.data)

    def _remember(self, user_id: UUID, data: UserData) -> None:
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.cache_ttl_seconds)
        self._cache[user_id] = _CachedSnapshot(data=data, expires_at=expires_at)

    def _prune(self) -> None:
        # Pending copies stay until written.
        now = datetime.now(tz=UTC)
        expired = [
            user_id
            for user_id, entry in self._cache.items()
            if user_id not in self._dirty and now >= entry.expires_at
        ]
        for user_id in expired:
            self._cache.pop(user_id, None)

    def _cancel_timer(self, user_id: UUID) -> None:
        timer = self._timers.pop(user_id, None)
        if timer is not None and not timer.done():
            timer.cancel()
