"""Wires resolution, subscriptions, classification and alerting together."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from golive.models import NotificationPayload
from golive.services import (
    AlertFormatter,
    Classification,
    Denied,
    DiscordWebhookSender,
    IdentityResolver,
    NotificationClassifier,
    SubscriptionManager,
    validate_handshake,
)
from golive.services.twitch_api import HandshakeResult

logger = logging.getLogger(__name__)


class GoLiveRelay:
    """Turns webhook deliveries into at most one Discord alert per live session."""

    def __init__(
        self,
        *,
        resolver: IdentityResolver,
        subscriptions: SubscriptionManager,
        classifier: NotificationClassifier,
        formatter: AlertFormatter,
        sender: DiscordWebhookSender,
        channel_names: list[str],
        callback_url: str,
    ) -> None:
        self.resolver = resolver
        self.subscriptions = subscriptions
        self.classifier = classifier
        self.formatter = formatter
        self.sender = sender
        self.channel_names = channel_names
        self.callback_url = callback_url

        self.subscribed_ids: list[str] = []
        self.notifications_received = 0
        self.alerts_sent = 0

    async def start_subscriptions(self) -> list[str]:
        """Resolve configured channels and subscribe to their stream topics.

        ``ChannelLookupError`` propagates: without ids there is nothing to
        relay. Individual subscription failures are logged only.
        """
        user_ids = await self.resolver.resolve_ids(self.channel_names)
        errors = await self.subscriptions.subscribe(self.callback_url, user_ids)

        failed = {e.user_id for e in errors}
        self.subscribed_ids = [uid for uid in user_ids if uid not in failed]
        return self.subscribed_ids

    async def stop_subscriptions(self) -> None:
        if not self.subscribed_ids:
            return
        await self.subscriptions.unsubscribe(self.callback_url, self.subscribed_ids)
        self.subscribed_ids = []

    def handle_handshake(self, query: Mapping[str, str]) -> HandshakeResult:
        result = validate_handshake(query)
        if isinstance(result, Denied):
            logger.warning(f"Webhook subscription denied: {result.reason} (topic={result.topic})")
        else:
            logger.info(
                f"Webhook {result.mode or 'confirmation'} for {result.topic} "
                f"(lease={result.lease_seconds}s)"
            )
        return result

    async def handle_notifications(self, payload: NotificationPayload) -> int:
        """Process a batch in order; returns the number of alerts sent."""
        if not payload.data:
            logger.debug("Received empty notification batch (stream offline)")
            return 0

        sent = 0
        for notification in payload.data:
            self.notifications_received += 1
            logger.info(
                f"Notification [name={notification.user_name}, type={notification.type}, "
                f"title={notification.title!r}, started_at={notification.started_at}]"
            )

            result = await self.classifier.classify(notification)
            if result is Classification.NOT_NEW:
                logger.debug(f"Skipping repeat notification for {notification.user_id}")
                continue

            message = self.formatter.format(notification.user_id)
            if await self.sender.send(message):
                sent += 1

        self.alerts_sent += sent
        return sent
