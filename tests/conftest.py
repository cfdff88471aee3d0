"""Shared lockfile builders for the test suite."""

import json

import pytest

YARN_HEADER = (
    "# THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.\n"
    "# yarn lockfile v1\n"
    "\n"
    "\n"
)


def _key(descriptor):
    if descriptor.startswith("@") or " " in descriptor or ":" in descriptor:
        return json.dumps(descriptor)
    return descriptor


def _name(descriptor):
    start = 1 if descriptor.startswith("@") else 0
    return descriptor[:descriptor.index("@", start)]


def block(descriptors, version, dependencies=None):
    """Render one lockfile entry the way yarn writes it."""
    name = _name(descriptors[0])
    base = name.rsplit("/", 1)[-1]
    lines = [
        ", ".join(_key(d) for d in descriptors) + ":",
        f'  version "{version}"',
        f'  resolved "https://registry.yarnpkg.com/{name}/-/{base}-{version}.tgz#0123abcd"',
        f"  integrity sha512-{base}-{version}==",
    ]
    if dependencies:
        lines.append("  dependencies:")
        for dep, spec in dependencies.items():
            lines.append(f"    {_key(dep)} {json.dumps(spec)}")
    return "\n".join(lines)


def make_lockfile(*blocks):
    """Join entries with yarn's header and blank-line separators."""
    return YARN_HEADER + "\n\n".join(blocks) + "\n"


CODE_FRAME_DEPS = {"@babel/highlight": "^7.12.13"}


@pytest.fixture
def left_pad_lock():
    return make_lockfile(
        block(["left-pad@^1.0.0"], "1.0.1"),
        block(["left-pad@^1.1.0"], "1.1.0"),
    )


@pytest.fixture
def mixed_lock():
    """Several packages: fixable, disjoint, single-version and pre-release."""
    return make_lockfile(
        block(["@babel/code-frame@^7.0.0"], "7.0.0", CODE_FRAME_DEPS),
        block(["@babel/code-frame@^7.10.4", "@babel/code-frame@^7.12.13"], "7.12.13", CODE_FRAME_DEPS),
        block(["@babel/highlight@^7.12.13"], "7.13.10"),
        block(["foo@^1.0.0"], "1.2.0"),
        block(["foo@^2.0.0"], "2.0.0"),
        block(["left-pad@^1.0.0"], "1.0.1"),
        block(["left-pad@^1.1.0"], "1.1.0"),
        block(["lodash@^4.17.15"], "4.17.15"),
        block(["lodash@^4.17.20", "lodash@^4.17.21"], "4.17.21"),
        block(["typescript@next"], "4.4.0-dev.20210601"),
        block(["typescript@^4.2.0"], "4.3.2"),
    )
