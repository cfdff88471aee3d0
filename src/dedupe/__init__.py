"""Lockfile deduplication engine."""

from .engine import fix_duplicates, list_duplicates

__all__ = [
    "fix_duplicates",
    "list_duplicates",
]
