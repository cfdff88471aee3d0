"""Detect package groups whose descriptors could share a resolved version."""

from __future__ import annotations

import logging
from typing import Iterable, List

from common.logging_utils import extra_context, is_debug_enabled

from .grouping import PackageFilter, PackageGroup, PackageInstance

logger = logging.getLogger(__name__)


def candidate_versions(
    group: PackageGroup, instance: PackageInstance, include_prerelease: bool = False
) -> List[str]:
    """Versions already in ``group`` that ``instance`` could resolve to.

    Only versions satisfying the range qualify. When none does, the current
    resolution is the sole candidate and the descriptor keeps it.
    """
    return satisfying_versions(group, instance, include_prerelease) or [instance.version]


def satisfying_versions(
    group: PackageGroup, instance: PackageInstance, include_prerelease: bool = False
) -> List[str]:
    """Versions of ``group`` that satisfy ``instance``'s range, ascending."""
    return [
        version
        for version in group.versions()
        if instance.range.satisfies(group.parsed[version], include_prerelease)
    ]


def is_fixable(group: PackageGroup, include_prerelease: bool = False) -> bool:
    """True when at least one descriptor has a candidate besides its current version."""
    if not group.has_duplicates():
        return False
    return any(
        candidate_versions(group, instance, include_prerelease) != [instance.version]
        for instance in group.instances
    )


def find_fixable_groups(
    groups: Iterable[PackageGroup],
    package_filter: PackageFilter,
    include_prerelease: bool = False,
) -> List[PackageGroup]:
    """Return the eligible groups containing a fixable duplicate, in input order."""
    fixable = []
    for group in groups:
        if not package_filter.is_eligible(group.name):
            continue
        if is_fixable(group, include_prerelease):
            fixable.append(group)
        elif is_debug_enabled(logger) and group.has_duplicates():
            logger.debug(
                "Incompatible ranges left untouched",
                extra=extra_context(
                    event="decision",
                    component="detector",
                    package=group.name,
                    versions=len(group.parsed),
                ),
            )
    return fixable
