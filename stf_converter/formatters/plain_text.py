"""Plain text table formatter.

WHY: A quick, grep-friendly dump of a table for review and archival:
no quoting rules, no schema, one entry per line.

HOW: A comment line carries the header fields, then each entry becomes
``id = value``. Line breaks inside values are written as the two
characters ``\\n`` so every entry stays on one line.

RULES:
- First line: "# version=V next_uid=N entries=C"
- One "id = value" line per entry, table order preserved
- "\\" is written as "\\\\", newline as "\\n", carriage return as "\\r"
- Values go through to_display() (surrogate pairs merged)
- Output ends with a single newline
- Output suffix: "-table.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List

from stf_converter.core.ir import STFData
from stf_converter.core.text import to_display
from stf_converter.formatters.base import BaseFormatter


def _escape_line(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r")


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces one ``id = value`` line per entry."""

    name = "Plain Text"
    suffix = "-table.txt"
    media_type = "text/plain"

    def render(self, data: STFData) -> str:
        lines: List[str] = [
            "# version={} next_uid={} entries={}".format(
                data.version, data.next_uid, len(data.entries),
            )
        ]
        for entry in data.entries:
            lines.append("{} = {}".format(
                _escape_line(entry.id), _escape_line(to_display(entry.value)),
            ))
        return "\n".join(lines) + "\n"
