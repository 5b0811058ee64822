"""In-memory model of a decoded STF string table.

WHY: The decoder, encoder, formatters, loaders, and the editing session
all need the same picture of a string table. A single pair of dataclasses
is the stable contract between them, so none of them needs to know the
binary layout.

HOW: Three dataclasses:
  StringEntry: one (id, value) row
  STFData:     the whole table: version byte, next UID counter, rows
  STFHeader:   the fixed header fields only, for cheap inspection

RULES:
- id is narrow text: every character is expected to fit in one byte;
  characters above 0xFF are truncated to their low byte on encode
- value is wide text held as 16-bit code units: a character outside the
  basic plane is stored as two surrogate characters
- version is an opaque unsigned byte, passed through unchanged
- next_uid is advisory; the codec round-trips it as-is
- entries order is significant (row order and on-disk order)
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class StringEntry:
    """One row of a string table.

    RULES:
    - id: narrow text, one byte per character on disk
    - value: wide text, one 16-bit code unit per character on disk
    """

    id: str
    value: str = ""


@dataclass
class STFData:
    """A complete string table.

    WHY: This is what ``decode`` returns and ``encode`` consumes. The
    editing session mutates it in place (replacing ``entries`` and
    ``next_uid`` on each edit).

    RULES:
    - version: 0..255, opaque
    - next_uid: 0..2**32-1, advisory "next fresh id" counter
    - entries: ordered rows; index numbering on disk is derived from
      this order and is not stored in the model
    """

    version: int
    next_uid: int
    entries: list[StringEntry] = field(default_factory=list)


@dataclass(frozen=True)
class STFHeader:
    """The fixed 13-byte header of an STF buffer."""

    version: int
    next_uid: int
    num_strings: int
