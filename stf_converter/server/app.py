"""HTTP API for STF tables.

WHY: Localization platforms and build servers that do not run Python
still need to read and write STF files. Three conversions cover them:
bytes -> JSON table, JSON table -> bytes, and bytes -> export document.

HOW: One FastAPI app. Each request is converted synchronously in the
handler; tables are small enough that there is nothing to queue. Uploads
are read whole and handed to core.decode; JSON bodies arrive as
TableModel and go to core.encode. Downloads are returned through
``_attachment`` so every file response carries the same headers.

RULES:
- Only STF_FILE_EXTENSIONS are accepted as uploads (400 otherwise)
- A FormatError becomes 422 with "<filename>: <decoder message>"
- An unknown export key is 400 and lists the available keys
- /tables/decode serializes with json.dumps so lone surrogates are
  written as \\uXXXX escapes instead of failing
- Download names go through Path(...).name; a client-supplied path
  never reaches the header
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, List, Optional

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from stf_converter import __version__
from stf_converter.config import API_HOST, API_PORT, STF_FILE_EXTENSIONS
from stf_converter.core.codec import FormatError, decode, encode
from stf_converter.core.ir import STFData
from stf_converter.formatters import FORMATTERS, available_formats
from stf_converter.formatters.json_table import table_to_dict
from stf_converter.server.models import (
    ErrorResponse,
    FormatInfo,
    HealthResponse,
    TableModel,
)

logger = logging.getLogger(__name__)

STF_MEDIA_TYPE = "application/octet-stream"

app = FastAPI(
    title="STF Converter API",
    description=(
        "Decode STF string tables to JSON, encode JSON tables to STF, and "
        "export STF files as JSON, CSV, or plain text."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_BAD_UPLOAD = {
    400: {"model": ErrorResponse, "description": "Not an .stf upload"},
    422: {"model": ErrorResponse, "description": "Malformed STF data"},
}


def _attachment(content, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(Path(filename).name)},
    )


async def _read_table(file: UploadFile) -> STFData:
    """Decode an upload, turning extension and format problems into HTTP errors."""
    filename = Path(file.filename or "upload").name
    ext = Path(filename).suffix.lower()
    if ext not in STF_FILE_EXTENSIONS:
        raise HTTPException(
            status_code=400,
            detail="Unsupported file type '{}'. Supported formats: {}".format(
                ext, ", ".join(sorted(STF_FILE_EXTENSIONS)),
            ),
        )
    raw = await file.read()
    try:
        return decode(raw)
    except FormatError as exc:
        logger.info("Rejected upload %s: %s", filename, exc)
        raise HTTPException(status_code=422, detail="{}: {}".format(filename, exc))


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@app.post(
    "/tables/decode",
    response_model=TableModel,
    tags=["tables"],
    summary="Decode an STF file",
    description="Returns the table's version byte, next UID, and rows in file order.",
    responses=_BAD_UPLOAD,
)
async def decode_table(
    file: Annotated[UploadFile, File(description="The .stf file.")],
) -> Response:
    data = await _read_table(file)
    return Response(content=json.dumps(table_to_dict(data)), media_type="application/json")


@app.post(
    "/tables/encode",
    tags=["tables"],
    summary="Encode a JSON table as STF",
    description=(
        "Rows are indexed from 1 in the order given. Id characters above "
        "0xFF keep only their low byte; characters above U+FFFF in values "
        "are stored as surrogate pairs."
    ),
    response_class=Response,
    responses={
        200: {"content": {STF_MEDIA_TYPE: {}}, "description": "The .stf bytes"},
        422: {"model": ErrorResponse, "description": "Body is not a valid table"},
    },
)
async def encode_table(
    table: TableModel,
    filename: Annotated[
        Optional[str],
        Query(description="Download name for the Content-Disposition header."),
    ] = None,
) -> Response:
    data = table.to_stf()
    logger.debug("Encoding %d entries", len(data.entries))
    return _attachment(encode(data), STF_MEDIA_TYPE, filename or "table.stf")


@app.post(
    "/tables/export",
    tags=["tables"],
    summary="Export an STF file",
    description="Runs one export format (see GET /formats) over an uploaded .stf file.",
    response_class=Response,
    responses={
        400: {"model": ErrorResponse, "description": "Not an .stf upload, or unknown format"},
        422: {"model": ErrorResponse, "description": "Malformed STF data"},
    },
)
async def export_table(
    file: Annotated[UploadFile, File(description="The .stf file.")],
    fmt: Annotated[
        str,
        Query(alias="format", description="Export key: json_table, csv_table, or plain_text."),
    ] = "json_table",
) -> Response:
    formatter_cls = FORMATTERS.get(fmt)
    if formatter_cls is None:
        raise HTTPException(
            status_code=400,
            detail="Unknown output format '{}'. Available: {}".format(
                fmt, ", ".join(available_formats()),
            ),
        )
    data = await _read_table(file)
    output = formatter_cls().format(data)[0]
    stem = Path(file.filename or "upload").stem
    return _attachment(output.content, output.media_type, output.filename(stem))


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@app.get(
    "/formats",
    response_model=List[FormatInfo],
    tags=["formats"],
    summary="List export formats",
    description="Every key accepted by POST /tables/export, with its file suffix and media type.",
)
async def list_formats() -> List[FormatInfo]:
    return [
        FormatInfo(
            key=key,
            name=FORMATTERS[key].name,
            suffix=FORMATTERS[key].suffix,
            media_type=FORMATTERS[key].media_type,
        )
        for key in available_formats()
    ]


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = API_HOST, port: int = API_PORT) -> None:
    """Serve the app with uvicorn (``stf_converter serve`` / ``stf-api``)."""
    import uvicorn

    logger.info("Starting STF Converter API on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
