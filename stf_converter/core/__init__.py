"""Core model and binary codec for STF string tables.

WHY: The core package is the stable heart of the converter: the table
dataclasses and the byte-exact codec. Everything else (formatters,
loaders, editor, CLI, HTTP API) is built on these two pieces.

HOW: ir.py defines the data structures, text.py the narrow/wide text
primitives, codec.py the decoder, encoder, and error taxonomy.

RULES:
- IR dataclasses are the contract; change with care
- The codec is pure: no I/O beyond the optional file helpers
- No formatter- or editor-specific logic here
"""

from stf_converter.core.codec import (
    BadMagicError,
    FormatError,
    TruncatedDataError,
    decode,
    decode_with_length,
    encode,
)
from stf_converter.core.ir import STFData, STFHeader, StringEntry

__all__ = [
    "BadMagicError",
    "FormatError",
    "STFData",
    "STFHeader",
    "StringEntry",
    "TruncatedDataError",
    "decode",
    "decode_with_length",
    "encode",
]
