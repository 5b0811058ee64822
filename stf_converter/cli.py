"""Command-line interface for the STF Converter.

WHY: Users need a simple way to inspect STF files, export them to
reviewable formats, and rebuild them after editing, from the terminal
and from build scripts. The CLI wires file validation, the codec, the
pluggable formatters, the table loaders, and output saving behind one
command with subcommands.

HOW: argparse with four subcommands:
  info   FILE                 header fields and entry count
  export FILE                 decode, run formatters, save next to FILE
  build  TABLE -o OUT.stf     load a JSON/CSV table and encode it
  serve                       run the HTTP API under uvicorn
Status messages go to stderr; ``info`` prints its report to stdout so it
can be piped.

RULES:
- export validates the extension against STF_FILE_EXTENSIONS first
- --formats: comma-separated formatter keys (default: all registered)
- Output naming: {stem}{suffix}, numeric suffix for conflicts
  (strings-table-2.json)
- Format and load errors print "Error: ..." to stderr and exit 1
- --log-level configures logging once, before any command runs
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
from pathlib import Path
from typing import List, Optional

from stf_converter import __version__
from stf_converter.adapters.table_loader import TableLoadError, load_table
from stf_converter.config import API_HOST, API_PORT, LOG_LEVEL, STF_FILE_EXTENSIONS
from stf_converter.core.codec import (
    FormatError,
    decode,
    decode_with_length,
    encode,
    read_header,
)
from stf_converter.core.text import narrowing_loss
from stf_converter.formatters import FORMATTERS, available_formats
from stf_converter.formatters.base import FormatterOutput


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _unused_path(output_dir: Path, stem: str, suffix: str) -> Path:
    """First free name among {stem}{suffix}, {stem}{name}-2{ext}, ...

    Re-exporting a table while translators still have the previous
    export open must not overwrite it. ``suffix`` is split at its last
    dot (``-table.json`` -> ``-table`` + ``.json``) and the counter goes
    between the two halves.
    """
    name, dot, ext = suffix.rpartition(".")
    if name:
        ext = dot + ext
    else:
        name, ext = suffix, ""
    candidates = itertools.chain(
        [output_dir / (stem + suffix)],
        (output_dir / "{}{}-{}{}".format(stem, name, n, ext) for n in itertools.count(2)),
    )
    return next(path for path in candidates if not path.exists())


def _write_export(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _unused_path(output_dir, stem, output.suffix)
    path.write_text(output.content, encoding="utf-8")
    return path


def _parse_format_keys(formats: Optional[str]) -> List[str]:
    if not formats:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in formats.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(available_formats())
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _read_stf_input(path_arg: str) -> Path:
    input_path = Path(path_arg).resolve()
    if not input_path.is_file():
        _fail("File not found: {}".format(input_path))

    ext = input_path.suffix.lower()
    if ext not in STF_FILE_EXTENSIONS:
        _fail("Unsupported file type '{}'. Supported formats: {}".format(
            ext, ", ".join(sorted(STF_FILE_EXTENSIONS)),
        ))
    return input_path


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_info(args: argparse.Namespace) -> int:
    input_path = _read_stf_input(args.input_file)
    raw = input_path.read_bytes()
    try:
        header = read_header(raw)
        data, consumed = decode_with_length(raw)
    except FormatError as exc:
        _fail("{}: {}".format(input_path.name, exc))

    print("file:        {}".format(input_path.name))
    print("size:        {} bytes".format(len(raw)))
    print("version:     {}".format(header.version))
    print("next_uid:    {}".format(header.next_uid))
    print("entries:     {}".format(header.num_strings))
    unique_ids = len({e.id for e in data.entries})
    if unique_ids != len(data.entries):
        print("duplicates:  {} id(s) used more than once".format(len(data.entries) - unique_ids))
    trailing = len(raw) - consumed
    if trailing > 0:
        print("trailing:    {} byte(s) after id section".format(trailing))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    input_path = _read_stf_input(args.input_file)
    format_keys = _parse_format_keys(args.formats)

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    _status("Decoding {}...".format(input_path.name))
    try:
        data = decode(input_path.read_bytes())
    except FormatError as exc:
        _fail("{}: {}".format(input_path.name, exc))
    _status("  {} entries, version {}, next_uid {}".format(
        len(data.entries), data.version, data.next_uid,
    ))

    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(data):
            saved_path = _write_export(output, input_path.stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return 0


def cmd_build(args: argparse.Namespace) -> int:
    table_path = Path(args.table)
    if not table_path.is_file():
        _fail("File not found: {}".format(table_path))

    try:
        data = load_table(table_path, version=args.version, next_uid=args.next_uid)
    except (TableLoadError, FormatError) as exc:
        _fail(str(exc))

    for entry in data.entries:
        if narrowing_loss(entry.id):
            _status("  Warning: id {!r} has characters above 0xFF; "
                    "only their low byte is written".format(entry.id))

    output_path = Path(args.output) if args.output else table_path.with_suffix(".stf")
    try:
        raw = encode(data)
    except ValueError as exc:
        _fail(str(exc))
    output_path.write_bytes(raw)
    _status("Wrote {} entries ({} bytes) to {}".format(len(data.entries), len(raw), output_path))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from stf_converter.server.app import run_api

    run_api(host=args.host, port=args.port)
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running a command.
    """
    parser = argparse.ArgumentParser(
        prog="stf_converter",
        description="Inspect, export, and rebuild STF string table files.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s " + __version__)
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging level (default: %(default)s).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_info = sub.add_parser("info", help="Show header fields and entry count.")
    p_info.add_argument("input_file", help="Path to the .stf file.")
    p_info.set_defaults(func=cmd_info)

    p_export = sub.add_parser("export", help="Export an .stf file to text formats.")
    p_export.add_argument("input_file", help="Path to the .stf file.")
    p_export.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(available_formats())),
    )
    p_export.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )
    p_export.set_defaults(func=cmd_export)

    p_build = sub.add_parser("build", help="Encode a JSON or CSV table as .stf.")
    p_build.add_argument("table", help="Path to a .json, .csv, or .stf table.")
    p_build.add_argument(
        "-o", "--output",
        default=None,
        help="Output .stf path (default: table path with .stf suffix).",
    )
    p_build.add_argument(
        "--table-version",
        dest="version",
        type=int,
        default=None,
        help="Override the version byte.",
    )
    p_build.add_argument(
        "--next-uid",
        type=int,
        default=None,
        help="Override the next-UID counter (default: from the table, else entries + 1).",
    )
    p_build.set_defaults(func=cmd_build)

    p_serve = sub.add_parser("serve", help="Run the HTTP API.")
    p_serve.add_argument("--host", default=API_HOST, help="Bind address (default: %(default)s).")
    p_serve.add_argument("--port", type=int, default=API_PORT, help="Port (default: %(default)s).")
    p_serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit code; errors exit early via sys.exit(1)
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
