"""Deduplication entry points.

``fix_duplicates`` and ``list_duplicates`` take lockfile text and options and
return text or diagnostic lines. They perform no I/O and keep no state
between calls; every fatal error surfaces before any output is produced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from common.errors import InvalidConfiguration
from common.logging_utils import Timer, extra_context, is_debug_enabled
from lockfile.models import Entry, Lockfile
from lockfile.parser import parse_lockfile
from lockfile.serializer import serialize_lockfile
from versioning.models import DedupeOptions, Strategy

from .detector import find_fixable_groups
from .grouping import PackageFilter, PackageGroup, group_by_package_name
from .report import format_diagnostic
from .strategies import popularity, select_versions

logger = logging.getLogger(__name__)

OptionsLike = Union[DedupeOptions, Mapping[str, Any], None]


@dataclass
class DedupePlan:
    """Selections for one pass over a parsed lockfile."""
    lockfile: Lockfile
    groups: Dict[str, PackageGroup]
    fixable: List[PackageGroup]
    selections: Dict[str, str]

    def moves(self):
        """Yield (group, instance, chosen version) for descriptors that change."""
        for group in self.fixable:
            for instance in group.instances:
                chosen = self.selections[instance.descriptor.raw]
                if chosen != instance.version:
                    yield group, instance, chosen


def resolve_options(options: OptionsLike) -> DedupeOptions:
    """Validate and normalize caller options.

    Raises:
        InvalidConfiguration: for unknown strategies, unknown keys or both
            include lists at once.
    """
    if options is None:
        return DedupeOptions()
    if isinstance(options, DedupeOptions):
        return options.validate()
    if isinstance(options, Mapping):
        return DedupeOptions.from_mapping(options).validate()
    raise InvalidConfiguration(f"Unsupported options type {type(options).__name__}")


def plan_dedupe(lockfile: Lockfile, options: DedupeOptions) -> DedupePlan:
    """Group, filter, detect and select for ``lockfile`` without mutating it."""
    groups = group_by_package_name(lockfile)
    package_filter = PackageFilter.from_options(options)
    fixable = find_fixable_groups(groups.values(), package_filter, options.include_prerelease)

    usage = None
    if options.strategy is Strategy.MOST_COMMON:
        usage = popularity(package_filter.eligible(groups))

    selections: Dict[str, str] = {}
    for group in fixable:
        selections.update(
            select_versions(group, options.strategy, options.include_prerelease, usage)
        )
    return DedupePlan(lockfile=lockfile, groups=groups, fixable=fixable, selections=selections)


def apply_plan(plan: DedupePlan) -> int:
    """Move descriptors onto their chosen entries; return the number moved."""
    targets: Dict[str, Dict[str, Entry]] = {}
    for group in plan.fixable:
        by_version: Dict[str, Entry] = {}
        for instance in group.instances:
            by_version.setdefault(instance.version, instance.entry)
        targets[group.name] = by_version

    moved = 0
    for group, instance, chosen in list(plan.moves()):
        raw = instance.descriptor.raw
        token = instance.entry.remove_descriptor(raw)
        targets[group.name][chosen].add_descriptor(raw, token)
        moved += 1
    dropped = plan.lockfile.prune()
    if is_debug_enabled(logger):
        logger.debug(
            "Applied selections",
            extra=extra_context(event="rewrite", component="engine", moved=moved, dropped=dropped),
        )
    return moved


def list_duplicates(text: str, options: OptionsLike = None) -> List[str]:
    """Return one diagnostic line per descriptor that would be merged."""
    resolved = resolve_options(options)
    plan = plan_dedupe(parse_lockfile(text), resolved)
    return [
        format_diagnostic(group.name, instance.descriptor.range, chosen, instance.version)
        for group, instance, chosen in plan.moves()
    ]


def fix_duplicates(text: str, options: OptionsLike = None) -> str:
    """Return ``text`` with compatible descriptors merged.

    The input is returned unchanged (line endings included) when nothing is
    fixable. Selection is repeated on its own result until no descriptor
    moves, so feeding the output back in is a no-op.
    """
    resolved = resolve_options(options)
    with Timer() as timer:
        lockfile = parse_lockfile(text)
        total = 0
        passes = 0
        limit = len(lockfile.descriptor_index()) + 1
        while passes < limit:
            passes += 1
            moved = apply_plan(plan_dedupe(lockfile, resolved))
            if not moved:
                break
            total += moved
        else:
            logger.warning("Deduplication did not settle after %d passes", passes)

    logger.info(
        "Strategy %s merged %d descriptor(s) in %d ms",
        resolved.strategy.value,
        total,
        timer.duration_ms(),
    )
    if not total:
        return text
    return serialize_lockfile(lockfile)
