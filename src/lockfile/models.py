"""In-memory model of a flat (v1) yarn lockfile."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class Entry:
    """One lockfile block: the descriptors it answers and its metadata.

    ``tokens`` keeps every descriptor's original spelling from the header
    (quoted or bare) so rewritten headers reuse it. ``body`` is the verbatim
    metadata block and is never edited.
    """

    descriptors: List[str]
    tokens: Dict[str, str]
    version: str
    header: str
    body: List[str]
    leading: List[str] = field(default_factory=list)
    line: int = 0
    dirty: bool = False

    def remove_descriptor(self, raw: str) -> str:
        """Detach ``raw`` and return its header spelling."""
        self.descriptors.remove(raw)
        self.dirty = True
        return self.tokens.pop(raw)

    def add_descriptor(self, raw: str, token: str) -> None:
        self.descriptors.append(raw)
        self.tokens[raw] = token
        self.descriptors.sort()
        self.dirty = True

    def header_line(self) -> str:
        """Return the header as it should be written."""
        if not self.dirty:
            return self.header
        return ", ".join(self.tokens[d] for d in self.descriptors) + ":"


@dataclass
class Lockfile:
    """Ordered entries plus the layout needed to write the text back."""

    entries: List[Entry]
    preamble: List[str] = field(default_factory=list)
    trailing: List[str] = field(default_factory=list)
    eol: str = "\n"
    indent: str = "  "
    final_newline: bool = True

    def descriptor_index(self) -> Dict[str, Entry]:
        """Map each raw descriptor to the entry that resolves it."""
        index: Dict[str, Entry] = {}
        for entry in self.entries:
            for raw in entry.descriptors:
                index[raw] = entry
        return index

    def prune(self) -> int:
        """Drop entries left without descriptors; return how many were dropped."""
        before = len(self.entries)
        self.entries = [e for e in self.entries if e.descriptors]
        return before - len(self.entries)
