"""Playwright crawler for the VIBE new-release album chart."""

__version__ = "0.1.0"
