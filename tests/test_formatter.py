from __future__ import annotations

from golive.models import ChannelIdentity
from golive.services import AlertFormatter, DisplayNameCache, IdentityResolver
from golive.services.formatter import escape_markdown_underscores


def _resolver(*identities: ChannelIdentity) -> IdentityResolver:
    cache = DisplayNameCache()
    for identity in identities:
        cache.add(identity)
    return IdentityResolver("client", cache=cache)


def test_escapes_underscores_in_display_name_only() -> None:
    formatter = AlertFormatter(_resolver(ChannelIdentity("42", "cool_streamer")))
    assert formatter.format("42") == (
        "cool\\_streamer is now live! http://twitch.tv/cool_streamer"
    )


def test_custom_twitch_url() -> None:
    formatter = AlertFormatter(
        _resolver(ChannelIdentity("42", "Streamer")), twitch_url="https://www.twitch.tv/"
    )
    assert formatter.format("42") == "Streamer is now live! https://www.twitch.tv/Streamer"


def test_unknown_user_keeps_template_with_empty_name() -> None:
    formatter = AlertFormatter(_resolver())
    assert formatter.format("404") == " is now live! http://twitch.tv/"


def test_escape_multiple_underscores() -> None:
    assert escape_markdown_underscores("__a_b__") == "\\_\\_a\\_b\\_\\_"
    assert escape_markdown_underscores("plain") == "plain"
