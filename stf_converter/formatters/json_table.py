"""JSON table formatter.

WHY: JSON is the format translators and build scripts can diff, review,
and edit. Exported tables can be turned back into STF with the JSON
loader, so this format must be lossless for every table the codec can
decode, including values with unpaired surrogate code units.

HOW: The table is rendered as ``{"version", "next_uid", "entries"}`` with
one ``{"id", "value"}`` object per row, in table order. ``json.dumps``
with ``ensure_ascii=True`` writes every non-ASCII code unit as a
``\\uXXXX`` escape, so lone surrogates survive the trip. The output is
validated against stf_table_schema.json with jsonschema before returning.

RULES:
- Row order is preserved exactly
- Values are written as code units (surrogates escaped, never merged)
- Output suffix: "-table.json"
- Validate output against the schema before returning; raise on failure
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from stf_converter.core.ir import STFData
from stf_converter.formatters.base import BaseFormatter

SCHEMA_PATH = Path(__file__).resolve().parent / "stf_table_schema.json"

_CACHED_SCHEMA: dict[str, Any] | None = None


def get_table_schema() -> dict[str, Any]:
    """Load the STF table JSON schema, cached after the first call."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def table_to_dict(data: STFData) -> dict[str, Any]:
    """Plain-dict rendition of a table, shared with the HTTP API."""
    return {
        "version": data.version,
        "next_uid": data.next_uid,
        "entries": [{"id": e.id, "value": e.value} for e in data.entries],
    }


class JSONTableFormatter(BaseFormatter):
    """Formatter that produces a schema-validated JSON table."""

    name = "JSON Table"
    suffix = "-table.json"
    media_type = "application/json"

    def render(self, data: STFData) -> str:
        """Render the table as indented JSON.

        Raises:
            jsonschema.ValidationError: If the generated JSON does not
                conform to the table schema (e.g. version out of range).
        """
        output = table_to_dict(data)
        jsonschema.validate(instance=output, schema=get_table_schema())
        return json.dumps(output, indent=2) + "\n"
