"""Base class for table exporters.

WHY: An STF table exports to exactly one text document per format. The
CLI saves that document next to the source file and the HTTP API sends
it as a download, so both need the document's suffix and media type as
well as its text, and /formats needs them without rendering anything.

HOW: Subclasses declare ``name``, ``suffix`` and ``media_type`` as class
attributes and implement ``render()``. ``format()`` wraps the rendered
text in a FormatterOutput; callers only ever use ``format()``.

RULES:
- ``suffix`` starts with a hyphen and ends with the file extension,
  e.g. ``"-table.json"``; the caller prepends the source stem
- ``render()`` must not mutate the table
- ``format()`` returns a one-item list so callers can treat every
  exporter the same way
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, List

from stf_converter.core.ir import STFData


@dataclass(frozen=True)
class FormatterOutput:
    """A rendered export: ``{stem}{suffix}`` holding ``content``."""

    suffix: str
    content: str
    media_type: str

    def filename(self, stem: str) -> str:
        return "{}{}".format(stem, self.suffix)


class BaseFormatter(ABC):
    """Renders an STFData table as one text document."""

    name: ClassVar[str]
    suffix: ClassVar[str]
    media_type: ClassVar[str]

    @abstractmethod
    def render(self, data: STFData) -> str:
        """Return the full document text for ``data``."""

    def format(self, data: STFData) -> List[FormatterOutput]:
        return [FormatterOutput(
            suffix=self.suffix,
            content=self.render(data),
            media_type=self.media_type,
        )]
