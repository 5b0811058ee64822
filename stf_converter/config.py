"""Settings read from the environment (and an optional .env file).

WHY: A few values differ between machines and pipelines: the version
byte stamped on tables built from JSON or CSV, the editor page size,
where the API listens, and how chatty logging is. They live here as
plain module constants so nothing else reads os.environ.

HOW: python-dotenv loads .env from the working directory on import, then
each constant is read once with its default.

RULES:
- Every setting is optional; the defaults give a working CLI and API
- Integer settings accept any int() literal (``0x10`` too) and raise
  ValueError naming the variable when they do not parse
- Extension sets are lowercase and include the dot
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        raise ValueError(
            "Environment variable {} must be an integer, got {!r}".format(name, raw)
        ) from None


# ---------------------------------------------------------------------------
# File extensions
# ---------------------------------------------------------------------------

STF_FILE_EXTENSIONS: set[str] = {".stf"}
"""Binary string table extensions (lowercase, with dot)."""

TABLE_EXTENSIONS: set[str] = {".json", ".csv"}
"""Text table formats accepted by the loaders (lowercase, with dot)."""

# ---------------------------------------------------------------------------
# Table defaults
# ---------------------------------------------------------------------------

DEFAULT_VERSION = _env_int("STF_DEFAULT_VERSION", 1)
"""Version byte used when a table is built from JSON/CSV without one."""

# ---------------------------------------------------------------------------
# Editing session defaults
# ---------------------------------------------------------------------------

PAGE_SIZE = _env_int("STF_PAGE_SIZE", 20)
NEW_ENTRY_PREFIX = os.getenv("STF_NEW_ENTRY_PREFIX", "new_entry")

# ---------------------------------------------------------------------------
# HTTP API and logging
# ---------------------------------------------------------------------------

API_HOST = os.getenv("STF_API_HOST", "127.0.0.1")
API_PORT = _env_int("STF_API_PORT", 8000)
LOG_LEVEL = os.getenv("STF_LOG_LEVEL", "WARNING").upper()
