"""Narrow and wide text primitives for the STF codec.

WHY: STF stores ids as one byte per character and values as one 16-bit
code unit per character. Python strings are sequences of code points, so
both directions need explicit, documented conversions instead of relying
on a codec's error handling.

HOW: Wide text is decoded with ``struct`` two bytes at a time and each
unit becomes one character, so surrogates are never merged. Narrow text
maps bytes 1:1 onto code points 0..255. Encoding masks each narrow
character to its low byte.

RULES:
- wide_units() splits characters above U+FFFF into a surrogate pair and
  passes every other ordinal (including lone surrogates) through
- Lengths written to disk are code-unit counts, never code-point counts
- encode_narrow() truncates with ``& 0xFF``; this is lossy by contract
- to_display() is for human-facing output only, never for encoding
"""

from __future__ import annotations

import struct
from typing import List

_REPLACEMENT_CHAR = "\ufffd"


def wide_units(value: str) -> List[int]:
    """Return the 16-bit code units that represent ``value`` on disk."""
    units: List[int] = []
    for ch in value:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            units.append(0xD800 | (code >> 10))
            units.append(0xDC00 | (code & 0x3FF))
        else:
            units.append(code)
    return units


def wide_length(value: str) -> int:
    """Number of code units ``value`` occupies in the value section."""
    return sum(2 if ord(ch) > 0xFFFF else 1 for ch in value)


def decode_wide(raw: bytes) -> str:
    """Decode little-endian 16-bit code units, one character per unit.

    No surrogate merging or normalization is done; a pair on disk comes
    back as two characters.
    """
    count = len(raw) // 2
    if not count:
        return ""
    units = struct.unpack("<{}H".format(count), raw[:count * 2])
    return "".join(map(chr, units))


def encode_wide(value: str) -> bytes:
    """Encode ``value`` as little-endian 16-bit code units."""
    units = wide_units(value)
    return struct.pack("<{}H".format(len(units)), *units)


def decode_narrow(raw: bytes) -> str:
    """Decode one character per byte, code point equal to the byte value."""
    return raw.decode("latin-1")


def truncate_to_byte(ch: str) -> int:
    """Low eight bits of a character's ordinal."""
    return ord(ch) & 0xFF


def encode_narrow(value: str) -> bytes:
    """Encode one byte per character, keeping only the low eight bits."""
    return bytes(truncate_to_byte(ch) for ch in value)


def narrowing_loss(value: str) -> List[str]:
    """Characters of ``value`` that ``encode_narrow`` cannot keep intact."""
    return [ch for ch in value if ord(ch) > 0xFF]


def to_code_units(value: str) -> str:
    """Rewrite ``value`` so that every character is a single code unit.

    Ordinary Python text (e.g. ``"\\U0001F600"``) becomes the surrogate
    pair the decoder would produce, which keeps decode(encode(d)) == d
    for tables built from user input.
    """
    if all(ord(ch) <= 0xFFFF for ch in value):
        return value
    return "".join(map(chr, wide_units(value)))


def to_display(value: str) -> str:
    """Merge valid surrogate pairs and replace lone surrogates with U+FFFD."""
    out: List[str] = []
    i = 0
    n = len(value)
    while i < n:
        code = ord(value[i])
        if 0xD800 <= code <= 0xDBFF and i + 1 < n and 0xDC00 <= ord(value[i + 1]) <= 0xDFFF:
            low = ord(value[i + 1])
            out.append(chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)))
            i += 2
            continue
        if 0xD800 <= code <= 0xDFFF:
            out.append(_REPLACEMENT_CHAR)
        else:
            out.append(value[i])
        i += 1
    return "".join(out)
