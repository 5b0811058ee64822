"""Pydantic schemas for the HTTP API.

WHY: TableModel is the JSON shape clients post to /tables/encode and
receive from /tables/decode. Declaring the header ranges here means an
out-of-range version byte is a 422 with a field path, not an encoder
error, and the same ranges show up in the /docs schema.

HOW: EntryModel and TableModel mirror StringEntry and STFData;
to_stf() turns a request body into the table the encoder takes.
FormatInfo, ErrorResponse and HealthResponse describe the remaining
endpoints.

RULES:
- TableModel fields match the json_table export, so an export can be
  posted back unchanged
- to_stf() splits characters above U+FFFF into surrogate pairs
- typing.List / Optional only; the package supports Python 3.9
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from stf_converter.core.ir import STFData, StringEntry
from stf_converter.core.text import to_code_units


class EntryModel(BaseModel):
    """One string table row."""

    id: str = Field(description="Narrow-text identifier (one byte per character on disk).")
    value: str = Field(default="", description="Wide-text value (UTF-16 code units on disk).")


class TableModel(BaseModel):
    """A complete string table.

    RULES:
    - version must fit in one byte
    - next_uid must fit in 32 bits
    - entries keep their order
    """

    version: int = Field(ge=0, le=255, description="Opaque STF version byte.")
    next_uid: int = Field(ge=0, le=0xFFFFFFFF, description="Advisory next-UID counter.")
    entries: List[EntryModel] = Field(
        default_factory=list,
        description="Rows in table order.",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {
                "version": 1,
                "next_uid": 2,
                "entries": [{"id": "hello", "value": "Hi"}],
            }
        ]
    }}

    def to_stf(self) -> STFData:
        return STFData(
            version=self.version,
            next_uid=self.next_uid,
            entries=[StringEntry(id=e.id, value=to_code_units(e.value)) for e in self.entries],
        )


class FormatInfo(BaseModel):
    """One entry of GET /formats."""

    key: str = Field(description="Value for the ?format= parameter of /tables/export.")
    name: str = Field(description="Display name, e.g. 'CSV Table'.")
    suffix: str = Field(description="File suffix produced (e.g. '-table.json').")
    media_type: str = Field(description="MIME type of the produced file.")


class ErrorResponse(BaseModel):
    """Body of every 4xx response raised by the API."""

    detail: str = Field(description="What was wrong with the request.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Always 'ok' while the process is serving.")
    version: str = Field(description="stf_converter package version.")
