"""CSV table formatter.

WHY: Spreadsheet tools are the usual way translators work through long
string lists. A two-column CSV opens directly in any of them.

HOW: csv.writer emits an ``id,value`` header and one row per entry.
Values go through to_display() so surrogate pairs read as the characters
they encode.

RULES:
- Header row is exactly ``id,value``
- One row per entry, table order preserved
- Line terminator is ``\\n``; embedded newlines are quoted by csv
- Unpaired surrogates are shown as U+FFFD (use JSON for lossless export)
- Output suffix: "-table.csv"
"""

from __future__ import annotations

import csv
import io

from stf_converter.core.ir import STFData
from stf_converter.core.text import to_display
from stf_converter.formatters.base import BaseFormatter

CSV_HEADER = ("id", "value")


class CSVTableFormatter(BaseFormatter):
    """Formatter that produces a two-column CSV table."""

    name = "CSV Table"
    suffix = "-table.csv"
    media_type = "text/csv"

    def render(self, data: STFData) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for entry in data.entries:
            writer.writerow((entry.id, to_display(entry.value)))
        return buf.getvalue()
