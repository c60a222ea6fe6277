"""Twitch go-live relay: forwards new live sessions to a Discord webhook."""

__version__ = "0.1.0"
