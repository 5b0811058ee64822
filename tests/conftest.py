"""Shared test fixtures for the stf_converter test suite.

WHY: Most test modules need the same reference table: the one-entry
worked example whose exact bytes are known. Centralizing it here keeps
every module checking against the same authoritative byte sequence.

HOW: Pytest fixtures provide the worked-example bytes and model, a
multi-entry table with non-ASCII values, and a helper that writes a
table to disk for file-based tests.

RULES:
- WORKED_EXAMPLE_HEX is the reference encoding of
  {version: 1, next_uid: 2, entries: [{id: "hello", value: "Hi"}]}
- Fixtures return fresh objects; tests may mutate them freely
"""

from typing import List

import pytest

from stf_converter.core.codec import encode
from stf_converter.core.ir import STFData, StringEntry


WORKED_EXAMPLE_HEX = (
    "CD AB 00 00 01 02 00 00 00 01 00 00 00 "
    "01 00 00 00 FF FF FF FF 02 00 00 00 48 00 69 00 "
    "01 00 00 00 05 00 00 00 68 65 6C 6C 6F"
)
WORKED_EXAMPLE_BYTES = bytes.fromhex(WORKED_EXAMPLE_HEX)


def _sample_entries() -> List[StringEntry]:
    return [
        StringEntry(id="menu_start", value="Start game"),
        StringEntry(id="menu_quit", value="Beenden"),
        StringEntry(id="greeting", value="\u3053\u3093\u306b\u3061\u306f"),
        StringEntry(id="empty", value=""),
        StringEntry(id="emoji", value="\ud83d\ude00 ok"),
    ]


@pytest.fixture
def worked_example_bytes():
    """The reference byte encoding of the one-entry worked example."""
    return WORKED_EXAMPLE_BYTES


@pytest.fixture
def worked_example_table():
    """The model the worked-example bytes decode to."""
    return STFData(version=1, next_uid=2, entries=[StringEntry(id="hello", value="Hi")])


@pytest.fixture
def sample_table():
    """Five rows: ASCII, German, Japanese, empty value, surrogate pair.

    Values are in code-unit form, so decode(encode(t)) == t holds."""
    return STFData(version=3, next_uid=6, entries=_sample_entries())


@pytest.fixture
def sample_stf_file(tmp_path, sample_table):
    """The sample table written to tmp_path/strings.stf."""
    path = tmp_path / "strings.stf"
    path.write_bytes(encode(sample_table))
    return path
