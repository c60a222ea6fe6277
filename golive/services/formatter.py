"""Builds the Discord go-live message."""

from __future__ import annotations

import logging

from .twitch_api import IdentityResolver

logger = logging.getLogger(__name__)

DEFAULT_TWITCH_URL = "http://twitch.tv"


def escape_markdown_underscores(text: str) -> str:
    """Discord treats ``_`` as italics; escape it so names render literally."""
    return text.replace("_", "\\_")


class AlertFormatter:
    def __init__(self, resolver: IdentityResolver, twitch_url: str = DEFAULT_TWITCH_URL) -> None:
        self.resolver = resolver
        self.twitch_url = twitch_url.rstrip("/")

    def stream_url(self, display_name: str) -> str:
        return f"{self.twitch_url}/{display_name}"

    def format(self, user_id: str) -> str:
        display_name = self.resolver.display_name_for(user_id)
        if not display_name:
            # Unresolved id; message goes out with an empty name
            logger.warning(f"No display name cached for user {user_id}")

        return (
            f"{escape_markdown_underscores(display_name)} is now live! "
            f"{self.stream_url(display_name)}"
        )
