"""Error taxonomy for the relay.

A denied webhook handshake is not an error; see ``services.twitch_api.Denied``.
"""

from __future__ import annotations

from enum import Enum


class RelayError(Exception):
    """Base class for all relay errors."""


class StoreError(RelayError):
    """Key-value backend unavailable or a query failed."""


class ParseError(RelayError, ValueError):
    """A timestamp did not match the platform format."""


class NotFoundError(RelayError):
    """No record stored for the requested key."""


class LookupErrorKind(str, Enum):
    EMPTY_INPUT = "empty_input"
    TRANSPORT = "transport"
    DECODE = "decode"


class ChannelLookupError(RelayError):
    """Channel name to user id resolution failed."""

    def __init__(self, kind: LookupErrorKind, message: str = "") -> None:
        self.kind = kind
        super().__init__(message or kind.value)


class SubscriptionError(RelayError):
    """A single webhook subscription request failed (non-fatal to the batch)."""

    def __init__(self, user_id: str, message: str) -> None:
        self.user_id = user_id
        super().__init__(f"{user_id}: {message}")
