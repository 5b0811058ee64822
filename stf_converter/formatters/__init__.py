"""Export formats, looked up by key.

WHY: ``stf_converter export --formats`` and ``POST /tables/export?format=``
both name exports by a short key. Keeping the key -> class mapping in one
place means a new export needs one new module and one new line here.

HOW: FORMATTERS maps each key to a BaseFormatter subclass. Classes are
stored, not instances; callers do ``FORMATTERS[key]()``.

RULES:
- Keys are snake_case and stable; scripts depend on them
- Importing this package must not do any I/O
"""

from __future__ import annotations

from typing import Dict, List, Type

from stf_converter.formatters.base import BaseFormatter
from stf_converter.formatters.csv_table import CSVTableFormatter
from stf_converter.formatters.json_table import JSONTableFormatter
from stf_converter.formatters.plain_text import PlainTextFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "json_table": JSONTableFormatter,
    "csv_table": CSVTableFormatter,
    "plain_text": PlainTextFormatter,
}


def available_formats() -> List[str]:
    """Registered keys in sorted order, for help text and error messages."""
    return sorted(FORMATTERS)
