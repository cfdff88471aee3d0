"""Flat yarn lockfile model, parser and serializer."""

from .models import Entry, Lockfile
from .parser import parse_lockfile
from .serializer import serialize_lockfile

__all__ = [
    "Entry",
    "Lockfile",
    "parse_lockfile",
    "serialize_lockfile",
]
