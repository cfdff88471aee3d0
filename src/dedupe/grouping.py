"""Group descriptors by package name and decide which packages are eligible."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import semantic_version

from lockfile.models import Entry, Lockfile
from versioning.models import DedupeOptions, Descriptor
from versioning.parser import parse_descriptor, parse_version, version_key
from versioning.ranges import VersionRange, parse_range


@dataclass
class PackageInstance:
    """One descriptor together with the entry currently resolving it."""
    descriptor: Descriptor
    entry: Entry
    range: VersionRange

    @property
    def version(self) -> str:
        return self.entry.version


@dataclass
class PackageGroup:
    """All descriptors sharing a package name."""
    name: str
    instances: List[PackageInstance] = field(default_factory=list)
    parsed: Dict[str, semantic_version.Version] = field(default_factory=dict)

    def add(self, instance: PackageInstance) -> None:
        self.instances.append(instance)
        if instance.version not in self.parsed:
            self.parsed[instance.version] = parse_version(instance.version)

    def versions(self) -> List[str]:
        """Distinct resolved versions, ascending by precedence then spelling."""
        return sorted(self.parsed, key=lambda v: (version_key(self.parsed[v]), v))

    def has_duplicates(self) -> bool:
        return len(self.parsed) > 1


def group_by_package_name(lockfile: Lockfile) -> Dict[str, PackageGroup]:
    """Index every descriptor of ``lockfile`` by package name.

    Iteration order is the order of first appearance in the file.

    Raises:
        UnparsableDescriptor: for keys that are not ``name@range``.
        UnparsableVersion: for resolved versions that are not semver.
    """
    groups: Dict[str, PackageGroup] = {}
    ranges: Dict[str, VersionRange] = {}
    for entry in lockfile.entries:
        for raw in entry.descriptors:
            descriptor = parse_descriptor(raw)
            if descriptor.range not in ranges:
                ranges[descriptor.range] = parse_range(descriptor.range)
            group = groups.get(descriptor.name)
            if group is None:
                group = groups[descriptor.name] = PackageGroup(descriptor.name)
            group.add(PackageInstance(descriptor, entry, ranges[descriptor.range]))
    return groups


def _normalize_scopes(scopes: Iterable[str]) -> Tuple[str, ...]:
    normalized = set()
    for scope in scopes:
        scope = scope.strip().rstrip("/")
        if not scope:
            continue
        if not scope.startswith("@"):
            scope = "@" + scope
        normalized.add(scope)
    return tuple(sorted(normalized))


def _in_scopes(name: str, scopes: Tuple[str, ...]) -> bool:
    return any(name.startswith(scope + "/") for scope in scopes)


class PackageFilter:
    """Eligibility test built from include/exclude lists.

    Includes narrow the set (packages or scopes, never both); excludes are
    subtracted afterwards.
    """

    def __init__(
        self,
        include_scopes: Iterable[str] = (),
        include_packages: Iterable[str] = (),
        exclude_packages: Iterable[str] = (),
        exclude_scopes: Iterable[str] = (),
    ):
        self.include_scopes = _normalize_scopes(include_scopes)
        self.include_packages: FrozenSet[str] = frozenset(include_packages)
        self.exclude_packages: FrozenSet[str] = frozenset(exclude_packages)
        self.exclude_scopes = _normalize_scopes(exclude_scopes)

    @classmethod
    def from_options(cls, options: Optional[DedupeOptions]) -> "PackageFilter":
        if options is None:
            return cls()
        return cls(
            include_scopes=options.include_scopes,
            include_packages=options.include_packages,
            exclude_packages=options.exclude_packages,
            exclude_scopes=options.exclude_scopes,
        )

    def is_eligible(self, name: str) -> bool:
        if self.include_scopes and not _in_scopes(name, self.include_scopes):
            return False
        if self.include_packages and name not in self.include_packages:
            return False
        if name in self.exclude_packages:
            return False
        if self.exclude_scopes and _in_scopes(name, self.exclude_scopes):
            return False
        return True

    def eligible(self, groups: Dict[str, PackageGroup]) -> List[PackageGroup]:
        """Return the eligible groups in their original order."""
        return [group for name, group in groups.items() if self.is_eligible(name)]
