"""Application settings."""

from resilient_fetch.settings.app import FetchSettings, get_settings


__all__ = ["FetchSettings", "get_settings"]
