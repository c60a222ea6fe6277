"""Twitch, Discord and notification handling services."""

from .classifier import Classification, NotificationClassifier
from .discord_webhook import DiscordWebhookSender
from .formatter import AlertFormatter
from .twitch_api import (
    Confirmed,
    Denied,
    DisplayNameCache,
    IdentityResolver,
    SubscriptionManager,
    validate_handshake,
)

__all__ = [
    "AlertFormatter",
    "Classification",
    "Confirmed",
    "Denied",
    "DiscordWebhookSender",
    "DisplayNameCache",
    "IdentityResolver",
    "NotificationClassifier",
    "SubscriptionManager",
    "validate_handshake",
]
