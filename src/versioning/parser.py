"""Descriptor and version parsing utilities."""

from typing import Tuple

import semantic_version

from common.errors import UnparsableDescriptor, UnparsableVersion

from .models import Descriptor


def split_descriptor(raw: str) -> Tuple[str, str]:
    """Return (name, range) for a raw ``name@range`` key.

    Scoped names keep their leading ``@``; the separator is the first ``@``
    after the scope. Everything after it is the range, so aliases such as
    ``foo@npm:bar@^1.0.0`` keep ``npm:bar@^1.0.0`` as an opaque range.
    """
    if not raw or not raw.strip():
        raise UnparsableDescriptor(raw, "empty descriptor")
    start = 1 if raw.startswith("@") else 0
    idx = raw.find("@", start)
    if idx < 0:
        raise UnparsableDescriptor(raw, "missing '@' separator")
    name, spec = raw[:idx], raw[idx + 1:]
    if not name or name == "@" or (name.startswith("@") and "/" not in name):
        raise UnparsableDescriptor(raw, "missing package name")
    return name, spec


def parse_descriptor(raw: str) -> Descriptor:
    """Parse a lockfile key into a Descriptor."""
    name, spec = split_descriptor(raw)
    return Descriptor(name=name, range=spec.strip(), raw=raw)


def clean_version(raw: str) -> str:
    """Strip the decorations npm tolerates around a version (``v1.2.3``, ``=1.2.3``)."""
    s = raw.strip()
    while s[:1] in ("=", "v", "V"):
        s = s[1:].lstrip()
    return s


def parse_version(raw: str) -> semantic_version.Version:
    """Parse a resolved version string.

    Raises:
        UnparsableVersion: if the value is not a full semantic version.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise UnparsableVersion(str(raw))
    try:
        return semantic_version.Version(clean_version(raw))
    except ValueError as e:
        raise UnparsableVersion(raw) from e


def version_key(version: semantic_version.Version) -> semantic_version.Version:
    """Return the precedence-relevant part of a version (build metadata dropped)."""
    if version.build:
        return version.truncate("prerelease")
    return version
