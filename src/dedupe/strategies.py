"""Version selection strategies.

Every strategy picks among the versions already resolved for the package, so
deduplication never introduces a version the lockfile did not contain.
Ties are broken by version precedence, which makes the outcome independent of
iteration order.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from versioning.models import Strategy

from .detector import candidate_versions, satisfying_versions
from .grouping import PackageGroup

Popularity = Dict[Tuple[str, str], int]


def coverage(group: PackageGroup, include_prerelease: bool = False) -> Dict[str, int]:
    """Count, for each version of ``group``, the descriptors whose range it satisfies."""
    counts = {version: 0 for version in group.versions()}
    for instance in group.instances:
        for version in satisfying_versions(group, instance, include_prerelease):
            counts[version] += 1
    return counts


def popularity(groups: Iterable[PackageGroup]) -> Popularity:
    """Count descriptors currently resolved to each (package, version)."""
    counts: Popularity = {}
    for group in groups:
        for instance in group.instances:
            key = (group.name, instance.version)
            counts[key] = counts.get(key, 0) + 1
    return counts


def _pick(candidates: List[str], score: Dict[str, int], prefer_higher: bool) -> str:
    # candidates are ascending, so the index doubles as version rank
    def key(item: Tuple[int, str]) -> Tuple[int, int]:
        rank, version = item
        return score.get(version, 0), (rank if prefer_higher else -rank)

    return max(enumerate(candidates), key=key)[1]


def select_versions(
    group: PackageGroup,
    strategy: Strategy,
    include_prerelease: bool = False,
    usage: Optional[Popularity] = None,
) -> Dict[str, str]:
    """Choose a version for every descriptor of ``group``.

    Args:
        group: Package group to resolve.
        strategy: Selection strategy.
        include_prerelease: Let pre-releases satisfy plain ranges.
        usage: Popularity table for ``Strategy.MOST_COMMON``; computed from
            the group alone when omitted.

    Returns:
        Mapping of raw descriptor to chosen version string.
    """
    if strategy in (Strategy.FEWER, Strategy.FEWER_HIGHEST):
        score = coverage(group, include_prerelease)
    elif strategy is Strategy.MOST_COMMON:
        table = usage if usage is not None else popularity([group])
        score = {version: table.get((group.name, version), 0) for version in group.versions()}
    elif strategy is Strategy.HIGHEST:
        score = {}
    else:
        raise ValueError(f"Unhandled strategy {strategy!r}")

    prefer_higher = strategy is not Strategy.FEWER
    chosen: Dict[str, str] = {}
    for instance in group.instances:
        candidates = candidate_versions(group, instance, include_prerelease)
        chosen[instance.descriptor.raw] = _pick(candidates, score, prefer_higher)
    return chosen
