"""Redline - review engine for machine-proposed code changes."""

__version__ = "0.1.0"
