"""
Database models for the URL shortener.

A single table holds the authoritative link records; the cache only mirrors it.
"""

from .link import Link

__all__ = ["Link"]
