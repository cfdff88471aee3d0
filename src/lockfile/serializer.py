"""Write a Lockfile back to text."""

from __future__ import annotations

from typing import List

from .models import Lockfile


def serialize_lockfile(lockfile: Lockfile) -> str:
    """Return the lockfile text.

    Untouched entries are written exactly as parsed. Entries whose descriptor
    set changed get a rebuilt header; their metadata block is copied as is.
    """
    lines: List[str] = list(lockfile.preamble)
    for position, entry in enumerate(lockfile.entries):
        if position > 0:
            lines.extend(entry.leading)
        lines.append(entry.header_line())
        lines.extend(entry.body)
    lines.extend(lockfile.trailing)

    text = lockfile.eol.join(lines)
    if lockfile.final_newline and lines:
        text += lockfile.eol
    return text
