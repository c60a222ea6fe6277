"""Data models for Twitch payloads and resolved channels."""

from .twitch import (
    MAX_LEASE_SECONDS,
    ChannelIdentity,
    HubMode,
    LiveNotification,
    NotificationPayload,
    SubscriptionRequest,
    TwitchUser,
    TwitchUsersPayload,
)

__all__ = [
    "MAX_LEASE_SECONDS",
    "ChannelIdentity",
    "HubMode",
    "LiveNotification",
    "NotificationPayload",
    "SubscriptionRequest",
    "TwitchUser",
    "TwitchUsersPayload",
]
