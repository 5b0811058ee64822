"""Binary decoder and encoder for STF string tables.

WHY: STF files are the on-disk form of localized string resources. Every
other part of the package (CLI, HTTP API, editing session, formatters)
reaches the bytes only through ``decode`` and ``encode``, so this module
owns the whole layout contract and must reproduce it byte-for-byte.

HOW: Layout, all integers little-endian:

  offset 0   magic        u16  = 0xABCD
  offset 2   padding      2 bytes, ignored on read, zero on write
  offset 4   version      u8
  offset 5   next_uid     u32
  offset 9   num_strings  u32
  offset 13  value section: num_strings x {index u32, key u32 = 0xFFFFFFFF,
             length u32 (code units), length * 2 bytes UTF-16LE units}
  ...        id section:    num_strings x {index u32, length u32 (bytes),
             length bytes of narrow text}

Decoding is two passes: the value section fills an index -> value map,
then the id section is walked in on-disk order and each id is resolved
against the map. Encoding precomputes the exact output size, then writes
into a preallocated bytearray with ``struct.pack_into``.

RULES:
- Indices are 1-based; the encoder always writes i+1 for the i-th entry
  in both sections
- An id whose index has no value record decodes with an empty value
- A later value record with a duplicate index replaces the earlier one
- The value-section key field is skipped on read, never validated
- Every length-prefixed read is bounds-checked; running off the end of
  the buffer raises TruncatedDataError, never returns partial data
- Trailing bytes after the id section are ignored
- Id characters above 0xFF are truncated to the low byte on encode and
  logged as a warning; this never raises
- Both operations are pure and keep no state between calls
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import Dict, List, Tuple, Union

from stf_converter.core.ir import STFData, STFHeader, StringEntry
from stf_converter.core.text import (
    decode_narrow,
    decode_wide,
    encode_narrow,
    encode_wide,
    narrowing_loss,
    wide_length,
)

logger = logging.getLogger(__name__)

MAGIC = 0xABCD
VALUE_KEY = 0xFFFFFFFF

_MAGIC = struct.Struct("<H")
_HEADER = struct.Struct("<HHBII")
_VALUE_RECORD = struct.Struct("<III")
_ID_RECORD = struct.Struct("<II")

HEADER_SIZE = _HEADER.size  # 13
VALUE_RECORD_SIZE = _VALUE_RECORD.size  # 12
ID_RECORD_SIZE = _ID_RECORD.size  # 8

# Smallest possible footprint of one entry (empty value, empty id).
_MIN_ENTRY_SIZE = VALUE_RECORD_SIZE + ID_RECORD_SIZE

_MAX_U8 = 0xFF
_MAX_U32 = 0xFFFFFFFF

BytesLike = Union[bytes, bytearray, memoryview]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class FormatError(ValueError):
    """Raised when a buffer is not a well-formed STF table."""


class BadMagicError(FormatError):
    """The first two bytes are not the STF magic constant."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            "Invalid magic: expected 0x{:04X}, got 0x{:04X}".format(expected, actual)
        )


class TruncatedDataError(FormatError):
    """A length field points past the end of the buffer."""

    def __init__(self, section: str, offset: int, needed: int, available: int) -> None:
        self.section = section
        self.offset = offset
        self.needed = needed
        self.available = available
        super().__init__(
            "Unexpected end of data in {} at offset {}: "
            "need {} byte(s), {} available".format(section, offset, needed, available)
        )


# ---------------------------------------------------------------------------
# Bounds-checked reader
# ---------------------------------------------------------------------------


class _Reader:
    """Cursor over an immutable buffer that refuses to read past the end."""

    def __init__(self, data: BytesLike) -> None:
        self._view = memoryview(data).cast("B")
        self.pos = 0
        self.section = "header"

    @property
    def remaining(self) -> int:
        return len(self._view) - self.pos

    def require(self, size: int) -> None:
        if size > self.remaining:
            raise TruncatedDataError(self.section, self.pos, size, self.remaining)

    def unpack(self, fmt: struct.Struct) -> tuple:
        self.require(fmt.size)
        values = fmt.unpack_from(self._view, self.pos)
        self.pos += fmt.size
        return values

    def peek(self, fmt: struct.Struct) -> tuple:
        self.require(fmt.size)
        return fmt.unpack_from(self._view, self.pos)

    def take(self, size: int) -> bytes:
        self.require(size)
        chunk = self._view[self.pos:self.pos + size].tobytes()
        self.pos += size
        return chunk


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


def _read_header(reader: _Reader) -> STFHeader:
    (magic,) = reader.peek(_MAGIC)
    if magic != MAGIC:
        raise BadMagicError(MAGIC, magic)
    _magic, _padding, version, next_uid, num_strings = reader.unpack(_HEADER)
    return STFHeader(version=version, next_uid=next_uid, num_strings=num_strings)


def read_header(data: BytesLike) -> STFHeader:
    """Validate the magic and return the fixed header fields.

    Raises:
        BadMagicError: The buffer does not start with ``CD AB``.
        TruncatedDataError: The buffer is shorter than the header.
    """
    return _read_header(_Reader(data))


def _decode(reader: _Reader) -> STFData:
    header = _read_header(reader)

    count = header.num_strings
    if count * _MIN_ENTRY_SIZE > reader.remaining:
        raise TruncatedDataError(
            "header", reader.pos, count * _MIN_ENTRY_SIZE, reader.remaining,
        )

    reader.section = "value section"
    values: Dict[int, str] = {}
    for _ in range(count):
        index, _key, length = reader.unpack(_VALUE_RECORD)
        values[index] = decode_wide(reader.take(length * 2))

    reader.section = "id section"
    entries: List[StringEntry] = []
    for _ in range(count):
        index, length = reader.unpack(_ID_RECORD)
        entry_id = decode_narrow(reader.take(length))
        entries.append(StringEntry(id=entry_id, value=values.get(index, "")))

    if reader.remaining:
        logger.debug(
            "Ignoring %d trailing byte(s) after id section (consumed %d)",
            reader.remaining, reader.pos,
        )
    logger.debug(
        "Decoded STF table: version=%d next_uid=%d entries=%d",
        header.version, header.next_uid, len(entries),
    )

    return STFData(version=header.version, next_uid=header.next_uid, entries=entries)


def decode(data: BytesLike) -> STFData:
    """Decode an STF buffer into an STFData table.

    WHY: Entry point for every consumer that reads STF files.

    HOW: Header, then the value section into an index map, then the id
    section in on-disk order, resolving each id's value by index.

    RULES:
    - Fails with FormatError rather than returning a partial table
    - Entries appear in id-section order
    - Missing value for an index decodes as ""

    Args:
        data: The complete file contents.

    Returns:
        A freshly allocated STFData.

    Raises:
        BadMagicError: Magic is not 0xABCD.
        TruncatedDataError: A length field runs past the end of ``data``.
    """
    return _decode(_Reader(data))


def decode_with_length(data: BytesLike) -> Tuple[STFData, int]:
    """Decode ``data`` and also return how many bytes the table occupied.

    The count is what the decoder actually read, so ``len(data) - count``
    is the number of trailing bytes. Re-encoding the result is not a
    substitute: a missing or duplicated value index changes the values
    the model holds without changing the records on disk.
    """
    reader = _Reader(data)
    table = _decode(reader)
    return table, reader.pos


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


def encoded_size(data: STFData) -> int:
    """Exact number of bytes ``encode(data)`` produces."""
    size = HEADER_SIZE
    for entry in data.entries:
        size += VALUE_RECORD_SIZE + wide_length(entry.value) * 2
        size += ID_RECORD_SIZE + len(entry.id)
    return size


def _check_model(data: STFData) -> None:
    if not 0 <= data.version <= _MAX_U8:
        raise ValueError("version must fit in one byte (0..255), got {}".format(data.version))
    if not 0 <= data.next_uid <= _MAX_U32:
        raise ValueError(
            "next_uid must fit in 32 bits (0..{}), got {}".format(_MAX_U32, data.next_uid)
        )
    if len(data.entries) > _MAX_U32:
        raise ValueError("too many entries: {}".format(len(data.entries)))


def encode(data: STFData) -> bytes:
    """Encode an STFData table into STF bytes.

    WHY: Entry point for every consumer that writes STF files.

    HOW: Compute the exact size, allocate once, write the header, then
    the value section and the id section in entry order, both indexed
    from 1.

    RULES:
    - Output length always equals encoded_size(data)
    - Indices are reassigned sequentially; no index is carried over
      from a previously decoded buffer
    - Id characters above 0xFF lose their high bits (logged, not raised)

    Raises:
        ValueError: version or next_uid does not fit its field.
    """
    _check_model(data)

    size = encoded_size(data)
    buf = bytearray(size)
    _HEADER.pack_into(buf, 0, MAGIC, 0, data.version, data.next_uid, len(data.entries))
    pos = HEADER_SIZE

    for i, entry in enumerate(data.entries):
        raw = encode_wide(entry.value)
        _VALUE_RECORD.pack_into(buf, pos, i + 1, VALUE_KEY, len(raw) // 2)
        pos += VALUE_RECORD_SIZE
        buf[pos:pos + len(raw)] = raw
        pos += len(raw)

    for i, entry in enumerate(data.entries):
        lost = narrowing_loss(entry.id)
        if lost:
            logger.warning(
                "Id %r (entry %d) has %d character(s) above 0xFF; "
                "writing low byte only", entry.id, i + 1, len(lost),
            )
        raw = encode_narrow(entry.id)
        _ID_RECORD.pack_into(buf, pos, i + 1, len(raw))
        pos += ID_RECORD_SIZE
        buf[pos:pos + len(raw)] = raw
        pos += len(raw)

    logger.debug("Encoded STF table: %d entries, %d bytes", len(data.entries), size)
    return bytes(buf)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


def decode_file(path: Union[str, Path]) -> STFData:
    """Read and decode an STF file."""
    return decode(Path(path).read_bytes())


def encode_file(data: STFData, path: Union[str, Path]) -> Path:
    """Encode ``data`` and write it to ``path``. Returns the path written."""
    target = Path(path)
    target.write_bytes(encode(data))
    return target
