"""Twitch API clients: channel name resolution and webhook subscriptions.

Both clients share one ``httpx.AsyncClient`` for connection reuse. The
identity resolver owns a display-name cache filled as a side effect of
resolution and read synchronously while formatting alerts.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from golive.core.errors import ChannelLookupError, LookupErrorKind, SubscriptionError
from golive.models import (
    MAX_LEASE_SECONDS,
    ChannelIdentity,
    HubMode,
    SubscriptionRequest,
    TwitchUsersPayload,
)

logger = logging.getLogger(__name__)

TWITCH_USERS_URL = "https://api.twitch.tv/kraken/users"
TWITCH_WEBHOOK_HUB_URL = "https://api.twitch.tv/helix/webhooks/hub"
TWITCH_STREAMS_TOPIC_URL = "https://api.twitch.tv/helix/streams"
TWITCH_V5 = "application/vnd.twitchtv.v5+json"

HUB_CHALLENGE = "hub.challenge"
HUB_LEASE_SECONDS = "hub.lease_seconds"
HUB_MODE = "hub.mode"
HUB_TOPIC = "hub.topic"
HUB_REASON = "hub.reason"
MODE_DENIED = "denied"


def streams_topic_url(user_id: str) -> str:
    """Topic URL for stream up/down/change events of one user."""
    return str(httpx.URL(TWITCH_STREAMS_TOPIC_URL, params={"user_id": user_id}))


class DisplayNameCache:
    """id -> display name, held for the process lifetime and never persisted."""

    def __init__(self) -> None:
        self._names: dict[str, str] = {}

    def add(self, identity: ChannelIdentity) -> None:
        self._names[identity.id] = identity.display_name

    def get(self, user_id: str) -> str:
        return self._names.get(user_id, "")

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._names

    def __len__(self) -> int:
        return len(self._names)


class IdentityResolver:
    """Maps channel names to stable Twitch user ids."""

    def __init__(
        self,
        client_id: str,
        cache: DisplayNameCache | None = None,
        http: httpx.AsyncClient | None = None,
        users_url: str = TWITCH_USERS_URL,
    ) -> None:
        if not client_id:
            raise ValueError("Twitch client_id is required")

        self.client_id = client_id
        self.cache = cache or DisplayNameCache()
        self.users_url = users_url
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        return {"Accept": TWITCH_V5, "Client-ID": self.client_id}

    async def resolve_ids(self, names: Iterable[str]) -> list[str]:
        """Resolve *names* with one batched lookup; ids come back in response order.

        Raises:
            ChannelLookupError: EMPTY_INPUT, TRANSPORT or DECODE.
        """
        names = list(names)
        if not names:
            raise ChannelLookupError(LookupErrorKind.EMPTY_INPUT, "No channel names to resolve")

        try:
            response = await self._http.get(
                self.users_url,
                params={"login": ",".join(names)},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise ChannelLookupError(
                LookupErrorKind.TRANSPORT, f"User lookup request failed: {e}"
            ) from e

        if not response.is_success:
            raise ChannelLookupError(
                LookupErrorKind.TRANSPORT,
                f"User lookup returned HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            payload = TwitchUsersPayload.model_validate_json(response.content)
        except ValidationError as e:
            raise ChannelLookupError(
                LookupErrorKind.DECODE, f"Malformed user lookup response: {e}"
            ) from e

        user_ids: list[str] = []
        for user in payload.users:
            identity = user.identity()
            self.cache.add(identity)
            user_ids.append(identity.id)
            logger.debug(f"Resolved {user.name} -> {identity.id} ({identity.display_name})")

        missing = {n.lower() for n in names} - {u.name.lower() for u in payload.users}
        if missing:
            logger.warning(f"Channels not found on Twitch: {', '.join(sorted(missing))}")

        logger.info(f"Resolved {len(user_ids)}/{len(names)} channel(s)")
        return user_ids

    def display_name_for(self, user_id: str) -> str:
        """Cache-only lookup; empty string when *user_id* was never resolved."""
        return self.cache.get(user_id)


# ------------------------------------------------------------------
# Handshake
# ------------------------------------------------------------------


@dataclass(frozen=True)
class Confirmed:
    """Subscription verified; respond 200 with *challenge* as the body."""

    challenge: str
    mode: str = ""
    topic: str = ""
    lease_seconds: str = ""


@dataclass(frozen=True)
class Denied:
    """Hub refused the subscription; respond 200 with an empty body."""

    reason: str
    topic: str = ""


HandshakeResult = Confirmed | Denied


def validate_handshake(query: Mapping[str, str]) -> HandshakeResult:
    """Interpret the hub's GET confirmation call."""
    mode = query.get(HUB_MODE, "")
    topic = query.get(HUB_TOPIC, "")

    if mode == MODE_DENIED:
        return Denied(reason=query.get(HUB_REASON, ""), topic=topic)

    return Confirmed(
        challenge=query.get(HUB_CHALLENGE, ""),
        mode=mode,
        topic=topic,
        lease_seconds=query.get(HUB_LEASE_SECONDS, ""),
    )


# ------------------------------------------------------------------
# Subscriptions
# ------------------------------------------------------------------


class SubscriptionManager:
    """Issues webhook hub subscribe / unsubscribe requests."""

    def __init__(
        self,
        client_id: str,
        http: httpx.AsyncClient | None = None,
        hub_url: str = TWITCH_WEBHOOK_HUB_URL,
        lease_seconds: int = MAX_LEASE_SECONDS,
    ) -> None:
        if not client_id:
            raise ValueError("Twitch client_id is required")

        self.client_id = client_id
        self.hub_url = hub_url
        self.lease_seconds = lease_seconds
        self._http = http or httpx.AsyncClient(timeout=10.0)

    async def close(self) -> None:
        await self._http.aclose()

    async def subscribe(self, callback_url: str, user_ids: Iterable[str]) -> list[SubscriptionError]:
        """Subscribe each id to its streams topic. Failures do not stop the batch."""
        return await self._send_all(HubMode.SUBSCRIBE, callback_url, user_ids)

    async def unsubscribe(
        self, callback_url: str, user_ids: Iterable[str]
    ) -> list[SubscriptionError]:
        return await self._send_all(HubMode.UNSUBSCRIBE, callback_url, user_ids)

    async def _send_all(
        self, mode: HubMode, callback_url: str, user_ids: Iterable[str]
    ) -> list[SubscriptionError]:
        errors: list[SubscriptionError] = []
        attempted = 0
        for user_id in user_ids:
            attempted += 1
            try:
                await self._send(mode, callback_url, user_id)
            except SubscriptionError as e:
                logger.error(f"Webhook {mode.value} failed: {e}")
                errors.append(e)

        logger.info(
            f"Webhook {mode.value}: {attempted - len(errors)}/{attempted} request(s) accepted"
        )
        return errors

    async def _send(self, mode: HubMode, callback_url: str, user_id: str) -> None:
        request = SubscriptionRequest(
            callback_url=callback_url,
            mode=mode,
            topic=streams_topic_url(user_id),
            lease_seconds=self.lease_seconds,
        )
        body = json.dumps(request.to_payload())
        logger.debug(f"Webhook request: {body}")

        try:
            response = await self._http.post(
                self.hub_url,
                content=body,
                headers={"Content-Type": "application/json", "Client-ID": self.client_id},
            )
        except httpx.HTTPError as e:
            raise SubscriptionError(user_id, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise SubscriptionError(
                user_id, f"HTTP {response.status_code}: {response.text[:200]}"
            )
