"""Parser for flat (v1) yarn lockfiles.

Grammar::

    # comment
    <descriptor>[, <descriptor>...]:
      version "1.2.3"
      resolved "https://..."
      dependencies:
        dep "^1.0.0"

Descriptors are bare or JSON-quoted. Metadata lines are kept verbatim; only
the ``version`` field is read. The tree-based dialect (``__metadata:``) is a
different grammar and is rejected.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict, List, Optional, Tuple

from common.errors import MalformedLockfile
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants

from .models import Entry, Lockfile

logger = logging.getLogger(__name__)

_VERSION_LINE = re.compile(r'^version:?\s+(.+?)\s*$')


def detect_eol(text: str) -> str:
    """Return the line ending of the first line break (LF when there is none)."""
    idx = text.find("\n")
    if idx > 0 and text[idx - 1] == "\r":
        return "\r\n"
    return "\n"


def split_lines(text: str) -> Tuple[List[str], str, bool]:
    """Split text into logical lines; return (lines, eol, final_newline)."""
    eol = detect_eol(text)
    final_newline = text.endswith("\n")
    lines = text.split("\n")
    if final_newline:
        lines.pop()
    if eol == "\r\n":
        lines = [line[:-1] if line.endswith("\r") else line for line in lines]
    return lines, eol, final_newline


def _unquote(spelling: str, line_no: int) -> str:
    try:
        value = json.loads(spelling)
    except ValueError as e:
        raise MalformedLockfile(f"invalid quoted string {spelling}", line_no) from e
    if not isinstance(value, str):
        raise MalformedLockfile(f"invalid quoted string {spelling}", line_no)
    return value


def split_header(line: str, line_no: int) -> List[Tuple[str, str]]:
    """Split an entry header into (descriptor, original spelling) pairs."""
    content = line.rstrip()
    if not content.endswith(":"):
        raise MalformedLockfile("expected an entry header ending with ':'", line_no)
    content = content[:-1]
    tokens: List[Tuple[str, str]] = []
    i, n = 0, len(content)
    while True:
        while i < n and content[i] == " ":
            i += 1
        if i >= n:
            raise MalformedLockfile("empty descriptor in entry header", line_no)
        if content[i] == '"':
            j = i + 1
            while j < n and content[j] != '"':
                j += 2 if content[j] == "\\" else 1
            if j >= n:
                raise MalformedLockfile("unterminated quote in entry header", line_no)
            spelling = content[i:j + 1]
            raw = _unquote(spelling, line_no)
            i = j + 1
        else:
            j = content.find(",", i)
            if j < 0:
                j = n
            spelling = content[i:j].rstrip()
            raw = spelling
            i = j
        if not raw:
            raise MalformedLockfile("empty descriptor in entry header", line_no)
        tokens.append((raw, spelling))
        while i < n and content[i] == " ":
            i += 1
        if i >= n:
            return tokens
        if content[i] != ",":
            raise MalformedLockfile("expected ',' between descriptors", line_no)
        i += 1


def _leading_whitespace(line: str) -> str:
    return line[:len(line) - len(line.lstrip())]


def _read_version(body: List[str], indent: str, line_no: int) -> str:
    """Return the `version` field found at the first indent level of ``body``."""
    for line in body:
        if not line.startswith(indent) or line[len(indent):len(indent) + 1].isspace():
            continue
        m = _VERSION_LINE.match(line[len(indent):])
        if m:
            value = m.group(1)
            return _unquote(value, line_no) if value.startswith('"') else value
    raise MalformedLockfile("entry has no version field", line_no)


def parse_lockfile(text: str) -> Lockfile:
    """Parse lockfile text into a Lockfile.

    Raises:
        MalformedLockfile: on structural errors, with the offending line number.
    """
    lines, eol, final_newline = split_lines(text)
    entries: List[Entry] = []
    preamble: List[str] = []
    pending: List[str] = []
    seen: Dict[str, int] = {}
    current: Optional[Entry] = None
    indent: Optional[str] = None

    def close(entry: Entry) -> None:
        if not entry.body:
            raise MalformedLockfile("entry has no metadata block", entry.line)
        entry.version = _read_version(entry.body, indent or "", entry.line)
        entries.append(entry)

    for line_no, line in enumerate(lines, 1):
        if not line.strip():
            if current is not None:
                close(current)
                current = None
            pending.append(line)
            continue
        if line[0] in (" ", "\t"):
            if current is None:
                raise MalformedLockfile("metadata line outside of any entry", line_no)
            if indent is None:
                indent = _leading_whitespace(line)
            elif not line.startswith(indent):
                raise MalformedLockfile("inconsistent indentation", line_no)
            current.body.append(line)
            continue
        if current is not None:
            close(current)
            current = None
        if line.startswith("#"):
            pending.append(line)
            continue

        tokens = split_header(line, line_no)
        if tokens[0][0] == Constants.BERRY_METADATA_KEY:
            raise MalformedLockfile("unsupported lockfile dialect (__metadata block)", line_no)
        for raw, _ in tokens:
            if raw in seen:
                raise MalformedLockfile(
                    f"descriptor {raw!r} already declared at line {seen[raw]}", line_no
                )
            seen[raw] = line_no
        if not entries:
            preamble, leading = pending, []
        else:
            leading = pending
        pending = []
        current = Entry(
            descriptors=[raw for raw, _ in tokens],
            tokens=dict(tokens),
            version="",
            header=line,
            body=[],
            leading=leading,
            line=line_no,
        )

    if current is not None:
        close(current)

    if entries:
        trailing = pending
    else:
        preamble, trailing = pending, []

    if is_debug_enabled(logger):
        logger.debug(
            "Parsed lockfile",
            extra=extra_context(
                event="parse",
                component="lockfile",
                entries=len(entries),
                descriptors=len(seen),
                eol="crlf" if eol == "\r\n" else "lf",
            ),
        )
    return Lockfile(
        entries=entries,
        preamble=preamble,
        trailing=trailing,
        eol=eol,
        indent=indent or "  ",
        final_newline=final_newline,
    )
