"""Decides whether a stream notification is a new live session.

Twitch delivers title and game changes with the same ``type == "live"`` as a
fresh broadcast. Only ``started_at`` moves when a new session begins, so the
decision compares it with the last value seen for the same user.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from golive.core.errors import RelayError
from golive.models import LiveNotification
from golive.storage import SessionStartTracker

logger = logging.getLogger(__name__)


class Classification(str, Enum):
    NEW_LIVE_SESSION = "new_live_session"
    NOT_NEW = "not_new"


class NotificationClassifier:
    def __init__(self, tracker: SessionStartTracker) -> None:
        self.tracker = tracker
        self._locks: dict[str, asyncio.Lock] = {}
        # holders plus waiters per user; the lock is dropped when this reaches 0
        self._lock_users: dict[str, int] = {}

    @property
    def active_locks(self) -> int:
        return len(self._locks)

    def _acquire_slot(self, user_id: str) -> asyncio.Lock:
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        self._lock_users[user_id] = self._lock_users.get(user_id, 0) + 1
        return self._locks[user_id]

    def _release_slot(self, user_id: str) -> None:
        self._lock_users[user_id] -= 1
        if not self._lock_users[user_id]:
            del self._lock_users[user_id]
            del self._locks[user_id]

    async def classify(self, notification: LiveNotification) -> Classification:
        """Classify *notification* and record its ``started_at``.

        Any failure reading the previous record is treated as "no record":
        a duplicate alert is preferred over a missed go-live.
        """
        lock = self._acquire_slot(notification.user_id)
        try:
            async with lock:
                return await self._classify_locked(notification)
        finally:
            self._release_slot(notification.user_id)

    async def _classify_locked(self, notification: LiveNotification) -> Classification:
        user_id = notification.user_id
        observed = notification.started_at

        try:
            if not await self.tracker.exists(user_id):
                await self._record(user_id, observed)
                logger.debug(f"First session seen for {user_id}")
                return Classification.NEW_LIVE_SESSION
            last_start = await self.tracker.get(user_id)
        except RelayError as e:
            logger.warning(
                f"Could not read session start for {user_id} "
                f"({type(e).__name__}: {e}), treating as new"
            )
            await self._record(user_id, observed)
            return Classification.NEW_LIVE_SESSION

        await self._record(user_id, observed)

        try:
            observed_start = self.tracker.parse(observed)
        except RelayError:
            # already logged by _record
            return Classification.NEW_LIVE_SESSION

        if observed_start == last_start:
            return Classification.NOT_NEW
        return Classification.NEW_LIVE_SESSION

    async def _record(self, user_id: str, started_at: str) -> None:
        """Store the latest observation; failures are logged, not raised."""
        try:
            await self.tracker.set(user_id, started_at)
        except RelayError as e:
            logger.error(
                f"Failed to record session start {started_at!r} for {user_id}: "
                f"{type(e).__name__}: {e}"
            )
