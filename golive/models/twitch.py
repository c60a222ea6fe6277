"""Twitch wire payloads and the channel identity record."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

MAX_LEASE_SECONDS = 864000


@dataclass(frozen=True)
class ChannelIdentity:
    """A resolved channel: stable user id plus its display name."""

    id: str
    display_name: str


class HubMode(str, Enum):
    SUBSCRIBE = "subscribe"
    UNSUBSCRIBE = "unsubscribe"


class SubscriptionRequest(BaseModel):
    """Body POSTed to the webhook hub for one topic."""

    model_config = ConfigDict(populate_by_name=True)

    callback_url: str = Field(alias="hub.callback")
    mode: HubMode = Field(alias="hub.mode")
    topic: str = Field(alias="hub.topic")
    lease_seconds: int = Field(
        default=MAX_LEASE_SECONDS, ge=0, le=MAX_LEASE_SECONDS, alias="hub.lease_seconds"
    )
    secret: str | None = Field(default=None, alias="hub.secret")

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class LiveNotification(BaseModel):
    """One entry of a stream-changed notification batch."""

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    user_id: str
    user_name: str = ""
    game_id: str = ""
    community_ids: list[str] = Field(default_factory=list)
    type: str = ""
    title: str = ""
    viewer_count: int = 0
    started_at: str = ""
    language: str = ""
    thumbnail_url: str = ""
    tag_ids: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        """Twitch sends null for unset fields (e.g. untagged streams); use defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class NotificationPayload(BaseModel):
    """POST body wrapper: ``{"data": [...]}``. An empty list means offline."""

    model_config = ConfigDict(extra="ignore")

    data: list[LiveNotification]


class TwitchUser(BaseModel):
    """User record from the v5 users lookup endpoint."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str = Field(alias="_id")
    name: str = ""
    display_name: str = ""

    def identity(self) -> ChannelIdentity:
        return ChannelIdentity(id=self.user_id, display_name=self.display_name or self.name)


class TwitchUsersPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    total: int = Field(default=0, alias="_total")
    users: list[TwitchUser]
