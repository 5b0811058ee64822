"""Headless editing session for STF documents.

WHY: Hosts that let users edit string tables (editor plugins, desktop
tools, scripts) need the same behavior: a searchable, paginated grid of
rows, duplicate-key protection, undo/redo, and open/save/revert/backup.
Keeping it here, outside the core, means the codec never learns about
sessions and hosts only draw widgets.

HOW: grid.py models the row grid a user interacts with. document.py
owns one file's table, its edit history, and its lifecycle, and talks to
the bytes only through core.decode / core.encode.

RULES:
- One STFDocument per file
- Every grid change is reported to the document as a whole-table edit
- The document recomputes next_uid as len(entries) + 1 on every edit
"""

from stf_converter.editor.document import Backup, STFDocument
from stf_converter.editor.grid import DuplicateKeyError, EntryGrid

__all__ = ["Backup", "DuplicateKeyError", "EntryGrid", "STFDocument"]
