"""Error taxonomy for lockfile deduplication.

Every error here is fatal for the operation that raised it: the engine never
returns partially rewritten output.
"""

from __future__ import annotations

from typing import Optional


class DedupeError(Exception):
    """Base class for all deduplication failures."""


class MalformedLockfile(DedupeError):
    """Raised when the lockfile text is structurally invalid."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        self.reason = message
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)


class UnparsableDescriptor(DedupeError, ValueError):
    """Raised when a raw descriptor cannot be split into name and range."""

    def __init__(self, raw: str, reason: str = "invalid descriptor"):
        self.raw = raw
        super().__init__(f"{reason}: {raw!r}")


class UnparsableVersion(DedupeError, ValueError):
    """Raised when a resolved version is not a semantic version."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"invalid version: {raw!r}")


class InvalidConfiguration(DedupeError, ValueError):
    """Raised for unknown strategies or conflicting include lists."""
