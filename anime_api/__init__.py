"""Anime episodes aggregation API."""

__version__ = "1.0.0"
