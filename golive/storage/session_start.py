"""Per-channel "last known session start" records on top of a key-value store.

Values are stored as the exact string the platform sent, after checking it
parses as an RFC3339 timestamp, so the backend stays a plain string store.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from golive.core.errors import NotFoundError, ParseError

from .base import KeyValueStore

logger = logging.getLogger(__name__)

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))$"
)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp into a timezone-aware datetime.

    Raises ``ParseError`` for anything else, including naive timestamps.
    """
    match = _RFC3339_RE.match(value or "")
    if not match:
        raise ParseError(f"Not an RFC3339 timestamp: {value!r}")

    year, month, day, hour, minute, second, frac, zulu, sign, off_h, off_m = match.groups()
    # Sub-microsecond digits are dropped
    microsecond = int((frac or "0")[:6].ljust(6, "0"))

    if zulu:
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        tz = timezone(-offset if sign == "-" else offset)

    try:
        return datetime(
            int(year),
            int(month),
            int(day),
            int(hour),
            int(minute),
            int(second),
            microsecond,
            tzinfo=tz,
        )
    except ValueError as e:
        raise ParseError(f"Invalid RFC3339 timestamp {value!r}: {e}") from e


class SessionStartTracker:
    """Stores and retrieves the most recent ``started_at`` per user id."""

    def __init__(
        self,
        store: KeyValueStore,
        parse: Callable[[str], datetime] = parse_rfc3339,
    ) -> None:
        self.store = store
        self._parse = parse

    def parse(self, value: str) -> datetime:
        return self._parse(value)

    async def exists(self, user_id: str) -> bool:
        """True iff the store holds a value for *user_id*."""
        return await self.store.get(user_id) is not None

    async def get(self, user_id: str) -> datetime:
        raw = await self.store.get(user_id)
        if raw is None:
            raise NotFoundError(f"No session start recorded for {user_id}")
        return self.parse(raw)

    async def set(self, user_id: str, started_at: str) -> None:
        """Validate then store *started_at*; malformed values are never written."""
        self.parse(started_at)
        await self.store.set(user_id, started_at)
