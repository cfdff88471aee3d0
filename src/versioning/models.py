"""Data models for descriptors, strategies and deduplication options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from common.errors import InvalidConfiguration


class Strategy(Enum):
    """Closed set of version selection strategies."""
    HIGHEST = "highest"
    FEWER = "fewer"
    FEWER_HIGHEST = "fewerHighest"
    MOST_COMMON = "mostCommon"

    @classmethod
    def parse(cls, value: Any) -> "Strategy":
        """Map a strategy name (or Strategy) to the enum member.

        Raises:
            InvalidConfiguration: for names outside the recognized set.
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value == value:
                return member
        valid = ", ".join(m.value for m in cls)
        raise InvalidConfiguration(f"Invalid strategy {value!r}. Valid values: {valid}")


@dataclass(frozen=True)
class Descriptor:
    """A requested (package name, range) pair parsed from a lockfile key."""
    name: str
    range: str
    raw: str

    @property
    def scope(self) -> Optional[str]:
        """Return ``@scope`` for scoped packages, else None."""
        if self.name.startswith("@") and "/" in self.name:
            return self.name.split("/", 1)[0]
        return None


def _as_frozenset(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    if values is None:
        return frozenset()
    if isinstance(values, str):
        return frozenset([values])
    return frozenset(v for v in values if v)


# Accepted option spellings mapped onto field names.
_KEY_ALIASES: Tuple[Tuple[str, str], ...] = (
    ("strategy", "strategy"),
    ("includeScopes", "include_scopes"),
    ("scopes", "include_scopes"),
    ("includePackages", "include_packages"),
    ("packages", "include_packages"),
    ("excludePackages", "exclude_packages"),
    ("exclude", "exclude_packages"),
    ("excludeScopes", "exclude_scopes"),
    ("includePrerelease", "include_prerelease"),
)


@dataclass(frozen=True)
class DedupeOptions:
    """Run configuration threaded through the engine entry points."""
    strategy: Strategy = Strategy.FEWER_HIGHEST
    include_scopes: FrozenSet[str] = field(default_factory=frozenset)
    include_packages: FrozenSet[str] = field(default_factory=frozenset)
    exclude_packages: FrozenSet[str] = field(default_factory=frozenset)
    exclude_scopes: FrozenSet[str] = field(default_factory=frozenset)
    include_prerelease: bool = False

    def __post_init__(self):
        # Frozen dataclass: normalize through object.__setattr__.
        object.__setattr__(self, "strategy", Strategy.parse(self.strategy))
        for name in ("include_scopes", "include_packages", "exclude_packages", "exclude_scopes"):
            object.__setattr__(self, name, _as_frozenset(getattr(self, name)))
        if not isinstance(self.include_prerelease, bool):
            raise InvalidConfiguration(
                f"includePrerelease must be true or false, got {self.include_prerelease!r}"
            )

    def validate(self) -> "DedupeOptions":
        """Reject contradictory include lists; return self for chaining."""
        if self.include_scopes and self.include_packages:
            raise InvalidConfiguration("Please specify either scopes or packages, not both.")
        return self

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> "DedupeOptions":
        """Build options from a dict using camelCase or snake_case keys.

        Unknown keys raise InvalidConfiguration.
        """
        if not mapping:
            return cls()
        aliases = dict(_KEY_ALIASES)
        known = set(aliases.values())
        kwargs = {}
        for key, value in mapping.items():
            target = aliases.get(key, key)
            if target not in known:
                raise InvalidConfiguration(f"Unknown option {key!r}")
            if value is None:
                continue
            kwargs[target] = value
        return cls(**kwargs)
