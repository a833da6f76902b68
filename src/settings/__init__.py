"""Environment settings for the command line poller."""

from .app import PollerSettings, get_settings


__all__ = ["PollerSettings", "get_settings"]
