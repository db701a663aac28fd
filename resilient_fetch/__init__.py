"""Resilient HTTP fetch client with bounded retry and structured failures."""

__version__ = "1.0.0"
