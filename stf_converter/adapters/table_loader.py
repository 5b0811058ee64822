"""Loaders that turn JSON and CSV tables back into STFData.

WHY: The JSON and CSV formatters are only useful for editing if the
edited file can be encoded back into STF. These loaders are the inverse
of those formatters and feed ``core.codec.encode``.

HOW: JSON is parsed with the standard json module and validated against
the same stf_table_schema.json the JSON formatter validates its output
with. CSV is read with csv.reader and must start with an ``id,value``
header. Values are normalized with to_code_units() so that characters
above U+FFFF become the surrogate pairs the decoder would produce.

RULES:
- Missing version defaults to config.DEFAULT_VERSION
- Missing next_uid defaults to len(entries) + 1 (the editor's policy)
- Explicit version / next_uid arguments override what the file says
- Ids are taken as-is; characters above 0xFF are left for the encoder
  to truncate (and warn about)
- Any malformed input raises TableLoadError (a ValueError)
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import jsonschema

from stf_converter.config import DEFAULT_VERSION, STF_FILE_EXTENSIONS, TABLE_EXTENSIONS
from stf_converter.core.codec import decode_file
from stf_converter.core.ir import STFData, StringEntry
from stf_converter.core.text import to_code_units
from stf_converter.formatters.csv_table import CSV_HEADER
from stf_converter.formatters.json_table import get_table_schema

logger = logging.getLogger(__name__)


class TableLoadError(ValueError):
    """Raised when a JSON or CSV table cannot be turned into STFData."""


def _build_table(
    entries: List[StringEntry],
    version: Optional[int],
    next_uid: Optional[int],
) -> STFData:
    return STFData(
        version=DEFAULT_VERSION if version is None else version,
        next_uid=len(entries) + 1 if next_uid is None else next_uid,
        entries=entries,
    )


def table_from_dict(
    doc: Any,
    version: Optional[int] = None,
    next_uid: Optional[int] = None,
) -> STFData:
    """Validate a parsed JSON table and convert it to STFData.

    Raises:
        TableLoadError: The document does not match the table schema.
    """
    try:
        jsonschema.validate(instance=doc, schema=get_table_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise TableLoadError("Invalid JSON table at {}: {}".format(location, exc.message)) from exc

    entries = [
        StringEntry(id=item["id"], value=to_code_units(item["value"]))
        for item in doc["entries"]
    ]
    return _build_table(
        entries,
        doc.get("version") if version is None else version,
        doc.get("next_uid") if next_uid is None else next_uid,
    )


def load_json_table(
    text: str,
    version: Optional[int] = None,
    next_uid: Optional[int] = None,
) -> STFData:
    """Parse a JSON table produced by the json_table formatter (or by hand)."""
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TableLoadError("Invalid JSON: {}".format(exc)) from exc
    return table_from_dict(doc, version=version, next_uid=next_uid)


def load_csv_table(
    text: str,
    version: Optional[int] = None,
    next_uid: Optional[int] = None,
) -> STFData:
    """Parse an ``id,value`` CSV table.

    A leading byte-order mark is ignored. Rows must have exactly two
    columns; a blank line is skipped.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    header = next(reader, None)
    if header is None or tuple(h.strip().lower() for h in header) != CSV_HEADER:
        raise TableLoadError(
            "CSV table must start with the header 'id,value', got {!r}".format(header)
        )

    entries: List[StringEntry] = []
    for row in reader:
        if not row:
            continue
        if len(row) != 2:
            raise TableLoadError(
                "CSV line {}: expected 2 columns, got {}".format(reader.line_num, len(row))
            )
        entries.append(StringEntry(id=row[0], value=to_code_units(row[1])))

    return _build_table(entries, version, next_uid)


def load_table(
    path: Union[str, Path],
    version: Optional[int] = None,
    next_uid: Optional[int] = None,
) -> STFData:
    """Load a table from a .json, .csv, or .stf file, chosen by suffix.

    Raises:
        TableLoadError: Unknown suffix or malformed text table.
        FormatError: Malformed .stf file.
    """
    source = Path(path)
    ext = source.suffix.lower()

    if ext in STF_FILE_EXTENSIONS:
        data = decode_file(source)
        if version is not None:
            data.version = version
        if next_uid is not None:
            data.next_uid = next_uid
        return data

    if ext == ".json":
        data = load_json_table(source.read_text(encoding="utf-8"), version, next_uid)
    elif ext == ".csv":
        data = load_csv_table(source.read_text(encoding="utf-8"), version, next_uid)
    else:
        raise TableLoadError(
            "Unsupported table type '{}'. Supported: {}".format(
                ext, ", ".join(sorted(STF_FILE_EXTENSIONS | TABLE_EXTENSIONS)),
            )
        )

    logger.info("Loaded %d entries from %s", len(data.entries), source.name)
    return data
