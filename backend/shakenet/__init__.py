"""Shake-to-connect social network graph service and layout engine."""

__version__ = "0.1.0"
