"""npm range handling on top of semantic_version.

``semantic_version.NpmSpec`` implements npm's matching rules, including the
default pre-release policy (a pre-release only matches a comparator set that
names a pre-release on the same ``major.minor.patch``). npm's
``includePrerelease`` flag has no counterpart there, so for that mode the
range is additionally desugared into plain comparator sets and pre-releases
are compared by semver precedence.
"""

import logging
import re
from typing import List, Optional, Tuple

import semantic_version

from .parser import clean_version, version_key

logger = logging.getLogger(__name__)

Comparator = Tuple[str, semantic_version.Version]

_LOWEST = ("0",)
_OPERATOR_GAP = re.compile(r'(<=|>=|<|>|=|\^|~>?)\s+(?=[0-9xX*vV])')
_LEADING_V = re.compile(r'(^|[\s<>=^~])[vV](?=\d)')
_HYPHEN = re.compile(r'^\s*([0-9A-Za-z\.\-\+\*]+)\s+-\s+([0-9A-Za-z\.\-\+\*]+)\s*$')
_COMPARATOR = re.compile(
    r'^(<=|>=|<|>|=|\^|~)?'
    r'([0-9xX*]+(?:\.[0-9xX*]+){0,2})'
    r'(?:-([0-9A-Za-z.-]+))?'
    r'(?:\+[0-9A-Za-z.-]+)?$'
)


def normalize_range(spec_str: str) -> str:
    """Normalize npm spellings NpmSpec does not accept (``>= 1.0``, ``~>1.2``, ``v1``)."""
    s = spec_str.strip()
    if not s or s.lower() == "x":
        return "*"
    s = s.replace("~>", "~")
    s = _OPERATOR_GAP.sub(r'\1', s)
    s = _LEADING_V.sub(r'\1', s)
    return s


def _normalize_simple(spec_str: str) -> str:
    """Rewrite hyphen and x-ranges into SimpleSpec-compatible comparators."""
    s = spec_str.strip()

    # Hyphen ranges: "1.2.3 - 1.4.5" => ">=1.2.3,<=1.4.5"
    m = _HYPHEN.match(s)
    if m:
        return f">={m.group(1)},<={m.group(2)}"

    s2 = s.replace('*', 'x').lower()
    m = re.match(r'^\s*(\d+)\.(\d+)\.x\s*$', s2)
    if m:
        major, minor = int(m.group(1)), int(m.group(2))
        return f">={major}.{minor}.0,<{major}.{minor + 1}.0"

    m = re.match(r'^\s*(\d+)(?:\.x)?\s*$', s2)
    if m:
        major = int(m.group(1))
        return f">={major}.0.0,<{major + 1}.0.0"

    return ",".join(s.split())


def _compile(spec_str: str):
    """Return a matcher for ``spec_str`` or None when it is not a semver range."""
    norm = normalize_range(spec_str)
    try:
        return semantic_version.NpmSpec(norm)
    except ValueError:
        pass
    try:
        return semantic_version.SimpleSpec(_normalize_simple(norm))
    except ValueError:
        logger.debug("Treating non-semver range %r as opaque", spec_str)
        return None


def _v(major: int, minor: int, patch: int, prerelease: Tuple[str, ...] = ()) -> semantic_version.Version:
    return semantic_version.Version(major=major, minor=minor, patch=patch, prerelease=prerelease)


def _partial(text: str) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    parts: List[Optional[int]] = []
    for piece in text.split("."):
        parts.append(None if piece in ("x", "X", "*") else int(piece))
    while len(parts) < 3:
        parts.append(None)
    major, minor, patch = parts
    # "1.x.3" is as wild as "1.x"
    if major is None:
        return None, None, None
    if minor is None:
        return major, None, None
    return major, minor, patch


_NOTHING: List[Comparator] = [("<", _v(0, 0, 0, _LOWEST))]


def _desugar_comparator(op: str, text: str, pre: Tuple[str, ...]) -> List[Comparator]:
    major, minor, patch = _partial(text)
    full = patch is not None

    if op in ("", "="):
        if major is None:
            return []
        if minor is None:
            return [(">=", _v(major, 0, 0, _LOWEST)), ("<", _v(major + 1, 0, 0, _LOWEST))]
        if not full:
            return [(">=", _v(major, minor, 0, _LOWEST)), ("<", _v(major, minor + 1, 0, _LOWEST))]
        return [("=", _v(major, minor, patch, pre))]

    if op == "^":
        if major is None:
            return []
        if minor is None:
            return [(">=", _v(major, 0, 0, _LOWEST)), ("<", _v(major + 1, 0, 0, _LOWEST))]
        low = _v(major, minor, patch, pre) if full else _v(major, minor, 0, _LOWEST)
        if major > 0:
            high = _v(major + 1, 0, 0, _LOWEST)
        elif minor > 0 or not full:
            high = _v(0, minor + 1, 0, _LOWEST)
        else:
            high = _v(0, 0, patch + 1, _LOWEST)
        return [(">=", low), ("<", high)]

    if op == "~":
        if major is None:
            return []
        if minor is None:
            return [(">=", _v(major, 0, 0, _LOWEST)), ("<", _v(major + 1, 0, 0, _LOWEST))]
        low = _v(major, minor, patch, pre) if full else _v(major, minor, 0, _LOWEST)
        return [(">=", low), ("<", _v(major, minor + 1, 0, _LOWEST))]

    if op == ">":
        if major is None:
            return list(_NOTHING)
        if minor is None:
            return [(">=", _v(major + 1, 0, 0, _LOWEST))]
        if not full:
            return [(">=", _v(major, minor + 1, 0, _LOWEST))]
        return [(">", _v(major, minor, patch, pre))]

    if op == ">=":
        if major is None:
            return []
        if not full:
            return [(">=", _v(major, minor or 0, 0, _LOWEST))]
        return [(">=", _v(major, minor, patch, pre))]

    if op == "<":
        if major is None:
            return list(_NOTHING)
        if not full:
            return [("<", _v(major, minor or 0, 0, _LOWEST))]
        return [("<", _v(major, minor, patch, pre))]

    # "<="
    if major is None:
        return []
    if minor is None:
        return [("<", _v(major + 1, 0, 0, _LOWEST))]
    if not full:
        return [("<", _v(major, minor + 1, 0, _LOWEST))]
    return [("<=", _v(major, minor, patch, pre))]


def _parse_token(token: str) -> Tuple[str, str, Tuple[str, ...]]:
    m = _COMPARATOR.match(token)
    if not m:
        raise ValueError(f"Invalid comparator {token!r}")
    op = m.group(1) or ""
    pre = tuple(m.group(3).split(".")) if m.group(3) else ()
    return op, m.group(2), pre


def desugar_range(spec_str: str) -> List[List[Comparator]]:
    """Expand an npm range into comparator sets (OR of ANDs).

    Raises:
        ValueError: if the expression is not an npm range.
    """
    result: List[List[Comparator]] = []
    for group in normalize_range(spec_str).split("||"):
        group = group.strip()
        comparators: List[Comparator] = []
        hyphen = _HYPHEN.match(group)
        if hyphen:
            _, low, low_pre = _parse_token(clean_version(hyphen.group(1)))
            _, high, high_pre = _parse_token(clean_version(hyphen.group(2)))
            comparators.extend(_desugar_comparator(">=", low, low_pre))
            comparators.extend(_desugar_comparator("<=", high, high_pre))
        else:
            for token in group.split():
                comparators.extend(_desugar_comparator(*_parse_token(token)))
        result.append(comparators)
    return result


def _holds(version: semantic_version.Version, op: str, target: semantic_version.Version) -> bool:
    if op == "<":
        return version < target
    if op == "<=":
        return version <= target
    if op == ">":
        return version > target
    if op == ">=":
        return version >= target
    return version == target


class VersionRange:
    """A parsed npm range with a satisfaction test."""

    def __init__(self, raw: str):
        self.raw = raw
        self._matcher = _compile(raw)
        self._sets: Optional[List[List[Comparator]]] = None
        if self._matcher is not None:
            try:
                self._sets = desugar_range(raw)
            except ValueError:
                self._sets = None

    @property
    def opaque(self) -> bool:
        """True for dist-tags, URLs, aliases and other non-semver specifiers."""
        return self._matcher is None

    def satisfies(self, version: semantic_version.Version, include_prerelease: bool = False) -> bool:
        """Return True when ``version`` satisfies this range."""
        if self._matcher is None:
            return False
        version = version_key(version)
        if include_prerelease and version.prerelease and self._sets is not None:
            return any(
                all(_holds(version, op, target) for op, target in comparators)
                for comparators in self._sets
            )
        return self._matcher.match(version)

    def __repr__(self) -> str:
        return f"VersionRange({self.raw!r})"


def parse_range(raw: str) -> VersionRange:
    """Parse a descriptor range; non-semver specifiers yield an opaque range."""
    return VersionRange(raw)
