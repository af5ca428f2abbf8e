"""Outbound notifications"""

from .discord_notifier import DiscordNotifier

__all__ = ["DiscordNotifier"]
