"""Tests for the fix/list entry points."""

import logging

import pytest

from common.errors import InvalidConfiguration, MalformedLockfile, UnparsableDescriptor, UnparsableVersion
from dedupe import fix_duplicates, list_duplicates
from dedupe.grouping import group_by_package_name
from lockfile.parser import parse_lockfile
from versioning.models import DedupeOptions, Strategy
from versioning.parser import parse_descriptor, parse_version
from versioning.ranges import parse_range

from conftest import CODE_FRAME_DEPS, block, make_lockfile

ALL_STRATEGIES = [s.value for s in Strategy]


def _resolutions(text):
    """Map every descriptor to its resolved version."""
    return {raw: entry.version for raw, entry in parse_lockfile(text).descriptor_index().items()}


class TestFixDuplicates:
    """Test rewriting lockfiles."""

    def test_merges_compatible_entries(self, left_pad_lock):
        assert fix_duplicates(left_pad_lock) == make_lockfile(
            block(["left-pad@^1.0.0", "left-pad@^1.1.0"], "1.1.0"),
        )

    def test_disjoint_ranges_untouched(self):
        text = make_lockfile(
            block(["foo@^1.0.0"], "1.2.0"),
            block(["foo@^2.0.0"], "2.0.0"),
        )
        assert fix_duplicates(text) is text

    def test_mixed_lockfile(self, mixed_lock):
        expected = make_lockfile(
            block(
                ["@babel/code-frame@^7.0.0", "@babel/code-frame@^7.10.4", "@babel/code-frame@^7.12.13"],
                "7.12.13",
                CODE_FRAME_DEPS,
            ),
            block(["@babel/highlight@^7.12.13"], "7.13.10"),
            block(["foo@^1.0.0"], "1.2.0"),
            block(["foo@^2.0.0"], "2.0.0"),
            block(["left-pad@^1.0.0", "left-pad@^1.1.0"], "1.1.0"),
            block(["lodash@^4.17.15", "lodash@^4.17.20", "lodash@^4.17.21"], "4.17.21"),
            block(["typescript@next"], "4.4.0-dev.20210601"),
            block(["typescript@^4.2.0"], "4.3.2"),
        )
        assert fix_duplicates(mixed_lock) == expected

    def test_include_prerelease(self):
        text = make_lockfile(
            block(["typescript@next"], "4.4.0-dev.20210601"),
            block(["typescript@^4.2.0"], "4.3.2"),
        )
        assert fix_duplicates(text) is text
        assert fix_duplicates(text, {"includePrerelease": True}) == make_lockfile(
            block(["typescript@^4.2.0", "typescript@next"], "4.4.0-dev.20210601"),
        )

    def test_fewer_tie_goes_to_lower_version(self):
        text = make_lockfile(
            block(["tie@1.0.0"], "1.0.0"),
            block(["tie@1.1.0", "tie@^1.0.0"], "1.1.0"),
        )
        assert fix_duplicates(text, {"strategy": "fewer"}) == make_lockfile(
            block(["tie@1.0.0", "tie@^1.0.0"], "1.0.0"),
            block(["tie@1.1.0"], "1.1.0"),
        )
        assert fix_duplicates(text, {"strategy": "fewerHighest"}) is text

    def test_most_common(self):
        text = make_lockfile(
            block(["bar@^1.0.0", "bar@~1.0.0"], "1.0.0"),
            block(["bar@>=1.0.0"], "1.1.0"),
        )
        assert fix_duplicates(text, {"strategy": "mostCommon"}) == make_lockfile(
            block(["bar@>=1.0.0", "bar@^1.0.0", "bar@~1.0.0"], "1.0.0"),
        )
        assert fix_duplicates(text, {"strategy": "highest"}) == make_lockfile(
            block(["bar@~1.0.0"], "1.0.0"),
            block(["bar@>=1.0.0", "bar@^1.0.0"], "1.1.0"),
        )

    def test_accepts_options_object(self, left_pad_lock):
        options = DedupeOptions(strategy=Strategy.HIGHEST)
        assert fix_duplicates(left_pad_lock, options) == fix_duplicates(left_pad_lock, {"strategy": "highest"})

    def test_logs_summary(self, left_pad_lock, caplog):
        with caplog.at_level(logging.INFO, logger="dedupe.engine"):
            fix_duplicates(left_pad_lock)
        assert "Strategy fewerHighest merged 1 descriptor(s)" in caplog.text


class TestNoOpStability:
    """Test that nothing fixable means identical output."""

    def test_already_deduplicated(self, left_pad_lock):
        once = fix_duplicates(left_pad_lock)
        assert fix_duplicates(once) == once

    def test_crlf_untouched(self):
        text = make_lockfile(
            block(["foo@^1.0.0"], "1.2.0"),
            block(["foo@^2.0.0"], "2.0.0"),
        ).replace("\n", "\r\n")
        assert fix_duplicates(text) == text

    def test_crlf_kept_when_rewriting(self, left_pad_lock):
        text = left_pad_lock.replace("\n", "\r\n")
        out = fix_duplicates(text)
        assert out == make_lockfile(
            block(["left-pad@^1.0.0", "left-pad@^1.1.0"], "1.1.0"),
        ).replace("\n", "\r\n")

    def test_empty_and_comment_only(self):
        assert fix_duplicates("") == ""
        banner = "# yarn lockfile v1\n"
        assert fix_duplicates(banner) == banner
        assert list_duplicates(banner) == []


@pytest.mark.parametrize("strategy", ALL_STRATEGIES)
class TestFixProperties:
    """Invariants every strategy must hold on a realistic lockfile."""

    def test_idempotent(self, mixed_lock, strategy):
        once = fix_duplicates(mixed_lock, {"strategy": strategy})
        assert fix_duplicates(once, {"strategy": strategy}) == once

    def test_ranges_stay_satisfied(self, mixed_lock, strategy):
        before = _resolutions(mixed_lock)
        after = _resolutions(fix_duplicates(mixed_lock, {"strategy": strategy}))
        for raw, version in after.items():
            if version == before[raw]:
                continue
            spec = parse_range(parse_descriptor(raw).range)
            assert spec.satisfies(parse_version(version)), raw

    def test_no_new_versions(self, mixed_lock, strategy):
        def pairs(text):
            return {
                (name, version)
                for name, group in group_by_package_name(parse_lockfile(text)).items()
                for version in group.versions()
            }

        out = fix_duplicates(mixed_lock, {"strategy": strategy})
        assert pairs(out) <= pairs(mixed_lock)

    def test_descriptors_kept_and_entries_shrink(self, mixed_lock, strategy):
        before = parse_lockfile(mixed_lock)
        after = parse_lockfile(fix_duplicates(mixed_lock, {"strategy": strategy}))
        assert set(after.descriptor_index()) == set(before.descriptor_index())
        assert len(after.entries) <= len(before.entries)


class TestFilters:
    """Test that ineligible packages are never touched."""

    def test_exclude_package(self, mixed_lock):
        out = _resolutions(fix_duplicates(mixed_lock, {"excludePackages": ["lodash"]}))
        assert out["lodash@^4.17.15"] == "4.17.15"
        assert out["left-pad@^1.0.0"] == "1.1.0"

    def test_include_scope(self, mixed_lock):
        out = _resolutions(fix_duplicates(mixed_lock, {"includeScopes": ["@babel"]}))
        assert out["@babel/code-frame@^7.0.0"] == "7.12.13"
        assert out["lodash@^4.17.15"] == "4.17.15"
        assert out["left-pad@^1.0.0"] == "1.0.1"

    def test_include_packages(self, mixed_lock):
        out = _resolutions(fix_duplicates(mixed_lock, {"includePackages": ["left-pad"]}))
        assert out["left-pad@^1.0.0"] == "1.1.0"
        assert out["@babel/code-frame@^7.0.0"] == "7.0.0"

    def test_exclude_scope(self, mixed_lock):
        out = _resolutions(fix_duplicates(mixed_lock, {"excludeScopes": ["babel"]}))
        assert out["@babel/code-frame@^7.0.0"] == "7.0.0"
        assert out["lodash@^4.17.15"] == "4.17.21"


class TestErrors:
    """Test that errors surface before any output."""

    def test_both_include_lists_rejected_before_parsing(self):
        options = {"includeScopes": ["@babel"], "includePackages": ["left-pad"]}
        with pytest.raises(InvalidConfiguration):
            fix_duplicates("not a lockfile", options)
        with pytest.raises(InvalidConfiguration):
            list_duplicates("not a lockfile", options)

    def test_unknown_strategy(self, left_pad_lock):
        with pytest.raises(InvalidConfiguration):
            fix_duplicates(left_pad_lock, {"strategy": "lowest"})

    def test_unsupported_options_type(self, left_pad_lock):
        with pytest.raises(InvalidConfiguration):
            fix_duplicates(left_pad_lock, ["highest"])

    def test_malformed(self):
        with pytest.raises(MalformedLockfile):
            fix_duplicates('  version "1.0.0"\n')

    def test_unparsable_version(self):
        text = make_lockfile(block(["foo@^1.0.0"], "1.0.0"), block(["foo@^1.1.0"], "banana"))
        with pytest.raises(UnparsableVersion):
            fix_duplicates(text)

    def test_unparsable_descriptor(self):
        text = make_lockfile(block(["foo@^1.0.0"], "1.0.0")) + '\nfoo:\n  version "1.0.0"\n'
        with pytest.raises(UnparsableDescriptor):
            list_duplicates(text)


class TestListDuplicates:
    """Test diagnostic output."""

    def test_line_format(self, left_pad_lock):
        assert list_duplicates(left_pad_lock) == [
            'Package "left-pad" wants ^1.0.0 and could get 1.1.0, but got 1.0.1',
        ]

    def test_mixed_lockfile(self, mixed_lock):
        assert list_duplicates(mixed_lock) == [
            'Package "@babel/code-frame" wants ^7.0.0 and could get 7.12.13, but got 7.0.0',
            'Package "left-pad" wants ^1.0.0 and could get 1.1.0, but got 1.0.1',
            'Package "lodash" wants ^4.17.15 and could get 4.17.21, but got 4.17.15',
        ]

    def test_empty_when_nothing_fixable(self, mixed_lock):
        assert list_duplicates(fix_duplicates(mixed_lock)) == []

    def test_list_agrees_with_fix(self, mixed_lock):
        for strategy in ALL_STRATEGIES:
            lines = list_duplicates(mixed_lock, {"strategy": strategy})
            changed = fix_duplicates(mixed_lock, {"strategy": strategy}) != mixed_lock
            assert bool(lines) is changed


@pytest.mark.parametrize("strategy", ALL_STRATEGIES)
class TestOutOfRangeResolutions:
    """Resolutions outside their own range, e.g. forced by ``resolutions``."""

    def test_moves_to_satisfying_version(self, strategy):
        text = make_lockfile(
            block(["foo@^1.0.0", "foo@^2.0.0"], "2.0.0"),
            block(["foo@^1.1.0"], "1.1.0"),
        )
        out = fix_duplicates(text, {"strategy": strategy})
        assert out == make_lockfile(
            block(["foo@^2.0.0"], "2.0.0"),
            block(["foo@^1.0.0", "foo@^1.1.0"], "1.1.0"),
        )
        for raw, version in _resolutions(out).items():
            assert parse_range(parse_descriptor(raw).range).satisfies(parse_version(version)), raw
        assert list_duplicates(text, {"strategy": strategy}) == [
            'Package "foo" wants ^1.0.0 and could get 1.1.0, but got 2.0.0',
        ]

    def test_kept_without_satisfying_version(self, strategy):
        text = make_lockfile(
            block(["bar@^1.0.0"], "2.0.0"),
            block(["bar@^3.0.0"], "3.0.0"),
        )
        assert fix_duplicates(text, {"strategy": strategy}) is text
        assert list_duplicates(text, {"strategy": strategy}) == []
